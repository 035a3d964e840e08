"""
Configuration management for the record form.

This module provides the configuration defaults, the JSON schema used to
validate form schema files, and helpers for application directories.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from PySide6.QtCore import QCoreApplication

# Application identifiers for QSettings
APP_ORGANIZATION = "RecordForm"
APP_NAME = "FormAssistant"

# Default configuration with all supported keys and JSON-serializable types
DEFAULT_CONFIG: dict[str, Any] = {
    # Remote record source
    "base_url": "http://localhost:8080",
    "fetch_path": "/get",
    "request_timeout": 10.0,
    # Submission targets
    "create_action": "/create",
    "update_path": "/update",
    # Form
    "schema_path": "",
    "mask_blank_char": "_",
    # Debug settings
    "log_level": "INFO",  # Options: "DEBUG", "INFO", "WARNING", "ERROR"
}

# JSON Schema for form schema files (draft-07)
FORM_SCHEMA_JSON_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Record form schema",
    "type": "object",
    "required": ["fields"],
    "properties": {
        "table_name": {"type": "string"},
        "fields": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "label": {"type": "string"},
                    "type": {"type": "string", "enum": ["int", "string", "text", "date", "float"]},
                    "primary_key": {"type": "boolean"},
                    "required": {"type": "boolean"},
                    "mask": {"type": "string"},
                    "validation": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string"},
                            "regex_rules": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "pattern": {"type": "string"},
                                        "message": {"type": "string"},
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}


@dataclass(frozen=True)
class FormConfig:
    """
    Resolved, read-only view of the settings the form needs at runtime.

    Built by ConfigManager.form_config() so widgets never touch QSettings.
    """

    base_url: str = DEFAULT_CONFIG["base_url"]
    fetch_path: str = DEFAULT_CONFIG["fetch_path"]
    request_timeout: float = DEFAULT_CONFIG["request_timeout"]
    create_action: str = DEFAULT_CONFIG["create_action"]
    update_path: str = DEFAULT_CONFIG["update_path"]
    mask_blank_char: str = DEFAULT_CONFIG["mask_blank_char"]

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "FormConfig":
        """Build a FormConfig from a configuration dictionary, ignoring unknown keys."""
        known = {key: values[key] for key in cls.__dataclass_fields__ if key in values}
        return cls(**known)

    def fetch_url(self, record_id: str) -> str:
        """Return the absolute URL used to fetch a record."""
        return f"{self.base_url.rstrip('/')}{self.fetch_path}?{urlencode({'id': record_id})}"

    def update_action(self, record_id: str) -> str:
        """Return the submission target for updating the given record."""
        return f"{self.update_path}?{urlencode({'id': record_id})}"


def setup_qsettings() -> None:
    """
    Configure QSettings with application identifiers.

    This should be called early in application startup to ensure
    QSettings uses the correct organization and application names.
    """
    QCoreApplication.setOrganizationName(APP_ORGANIZATION)
    QCoreApplication.setApplicationName(APP_NAME)
