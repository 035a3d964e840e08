"""
Persistent settings for the record form.

Stored values come back from QSettings and are coerced to the type of the
matching DEFAULT_CONFIG entry, since some backends hand everything back as
text. Command-line overrides sit on top for one run and are never stored.
"""

import logging
from collections.abc import Mapping
from typing import Any

from PySide6.QtCore import QSettings

from .config import DEFAULT_CONFIG, FormConfig, setup_qsettings
from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)


def _coerce(key: str, raw: Any) -> Any:
    default = DEFAULT_CONFIG[key]
    if raw is None:
        return default
    try:
        return type(default)(raw)
    except (TypeError, ValueError):
        logger.warning(f"Setting '{key}' holds {raw!r}, using the default {default!r}")
        return default


def check_setting(key: str, value: Any) -> None:
    """
    Reject a value the form cannot work with.

    Raises:
        ConfigError: With code CONFIG_INVALID and the offending key in its context
    """
    problem = None
    if key == "base_url" and not str(value).startswith(("http://", "https://")):
        problem = f"Invalid record server URL: {value!r}"
    elif key == "request_timeout" and value <= 0:
        problem = f"The request timeout must be positive, got {value!r}"
    elif key == "mask_blank_char" and len(value) != 1:
        problem = f"The mask blank character must be a single character, got {value!r}"

    if problem:
        raise ConfigError(code=ErrorCode.CONFIG_INVALID, user_message=problem, context={"key": key})


def _require_known(key: str) -> None:
    if key not in DEFAULT_CONFIG:
        raise ConfigError(
            code=ErrorCode.CONFIG_INVALID,
            user_message=f"Unknown setting '{key}'",
            context={"key": key},
        )


class ConfigManager:
    """
    QSettings-backed settings with per-run overrides.

    ``get`` answers with the override if one was given, else the stored
    value, else the default.
    """

    def __init__(self, overrides: Mapping[str, Any] | None = None) -> None:
        setup_qsettings()
        self._settings = QSettings()

        self._overrides: dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            if value is None:
                continue
            _require_known(key)
            self._overrides[key] = _coerce(key, value)

    def get(self, key: str) -> Any:
        """Effective value of ``key``."""
        _require_known(key)
        if key in self._overrides:
            return self._overrides[key]
        return _coerce(key, self._settings.value(key, DEFAULT_CONFIG[key]))

    def set(self, key: str, value: Any) -> None:
        """
        Check and store ``value`` for ``key``.

        Raises:
            ConfigError: For an unknown key or a value ``check_setting`` rejects
        """
        _require_known(key)
        value = _coerce(key, value)
        check_setting(key, value)
        self._settings.setValue(key, value)
        self._settings.sync()
        logger.debug(f"Stored setting '{key}'")

    def effective_settings(self) -> dict[str, Any]:
        """Every known setting with overrides and defaults applied."""
        return {key: self.get(key) for key in DEFAULT_CONFIG}

    def form_config(self) -> FormConfig:
        """
        Return the resolved runtime view of the settings.

        Raises:
            ConfigError: If a setting the form depends on is unusable
        """
        settings = self.effective_settings()
        for key in FormConfig.__dataclass_fields__:
            check_setting(key, settings[key])
        return FormConfig.from_dict(settings)
