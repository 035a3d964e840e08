"""
Centralized error taxonomy for the record form.

This module provides the error hierarchy shared by validation, record
fetching and configuration so failures are handled and reported consistently.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Error type categories for consistent error handling."""

    VALIDATION = "validation"
    FETCH = "fetch"
    CONFIG = "config"
    SYSTEM = "system"


class ErrorCode(Enum):
    """Specific error codes for common scenarios."""

    # Field validation errors
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    INVALID_FORMAT = "INVALID_FORMAT"

    # Record fetch errors
    FETCH_FAILED = "FETCH_FAILED"
    HTTP_STATUS = "HTTP_STATUS"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    TIMEOUT = "TIMEOUT"

    # Configuration errors
    SCHEMA_INVALID = "SCHEMA_INVALID"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Generic
    UNKNOWN = "UNKNOWN"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class BaseAppError(Exception):
    """
    Base application error with structured metadata.

    Every failure in the form subsystem is field- or action-scoped, so each
    error carries enough context to be rendered locally and logged.
    """

    type: ErrorType
    code: ErrorCode
    user_message: str
    technical_message: str | None = None
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retriable: bool = False
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return user-friendly error message."""
        return self.user_message

    def __repr__(self) -> str:
        """Return detailed error representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"type={self.type.value}, "
            f"code={self.code.value}, "
            f"message='{self.user_message}'"
            f")"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "code": self.code.value,
            "user_message": self.user_message,
            "technical_message": self.technical_message,
            "severity": self.severity.value,
            "retriable": self.retriable,
            "context": self.context,
        }


class ValidationError(BaseAppError):
    """Field validation errors (required value missing or bad format)."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        field: str | None = None,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.LOW,
        retriable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        context = context or {}
        if field:
            context["field"] = field

        super().__init__(
            type=ErrorType.VALIDATION,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            retriable=retriable,
            context=context,
        )

    @property
    def field(self) -> str | None:
        """Get the field that caused the validation error."""
        return self.context.get("field")


class FetchError(BaseAppError):
    """Record retrieval failures for edit mode."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        record_id: str | None = None,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        retriable: bool = True,
        context: dict[str, Any] | None = None,
    ):
        context = context or {}
        if record_id is not None:
            context["record_id"] = record_id

        super().__init__(
            type=ErrorType.FETCH,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            retriable=retriable,
            context=context,
        )

    @property
    def record_id(self) -> str | None:
        """Get the identifier of the record that could not be loaded."""
        return self.context.get("record_id")


class ConfigError(BaseAppError):
    """Configuration and form schema errors."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        retriable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.CONFIG,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            retriable=retriable,
            context=context or {},
        )


class SchemaError(ConfigError):
    """Raised when a form schema file cannot be read or is malformed."""

    def __init__(self, user_message: str, technical_message: str | None = None, path: str | None = None):
        super().__init__(
            code=ErrorCode.SCHEMA_INVALID,
            user_message=user_message,
            technical_message=technical_message,
            context={"path": path} if path else {},
        )


class SystemError(BaseAppError):
    """Unexpected system errors."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_message: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        retriable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            type=ErrorType.SYSTEM,
            code=code,
            user_message=user_message,
            technical_message=technical_message,
            severity=severity,
            retriable=retriable,
            context=context or {},
        )


FETCH_FAILED_MESSAGE = "Could not load the record for editing."

# Exception mapping configuration, most specific first
_EXCEPTION_MAPPING: list[tuple[type[Exception], ErrorType, ErrorCode, str]] = [
    (httpx.TimeoutException, ErrorType.FETCH, ErrorCode.TIMEOUT, FETCH_FAILED_MESSAGE),
    (httpx.HTTPStatusError, ErrorType.FETCH, ErrorCode.HTTP_STATUS, FETCH_FAILED_MESSAGE),
    (httpx.HTTPError, ErrorType.FETCH, ErrorCode.FETCH_FAILED, FETCH_FAILED_MESSAGE),
    (json.JSONDecodeError, ErrorType.FETCH, ErrorCode.INVALID_RESPONSE, FETCH_FAILED_MESSAGE),
    (TimeoutError, ErrorType.SYSTEM, ErrorCode.TIMEOUT, "Operation timed out"),
    (ValueError, ErrorType.VALIDATION, ErrorCode.INVALID_FORMAT, "Invalid input provided"),
]


def map_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """
    Map a built-in or library exception to a custom application error.

    Args:
        exc: The exception to map
        context: Optional context information

    Returns:
        BaseAppError instance with appropriate type and metadata
    """
    context = context or {}

    # Handle existing custom errors
    if isinstance(exc, BaseAppError):
        return exc

    for exc_type, error_type, error_code, default_message in _EXCEPTION_MAPPING:
        if not isinstance(exc, exc_type):
            continue

        technical_message = f"{type(exc).__name__}: {exc}"
        if error_type == ErrorType.FETCH:
            return FetchError(
                code=error_code,
                user_message=default_message,
                technical_message=technical_message,
                context=context,
            )
        if error_type == ErrorType.VALIDATION:
            return ValidationError(
                code=error_code,
                user_message=str(exc) or default_message,
                technical_message=technical_message,
                context=context,
            )
        return SystemError(
            code=error_code,
            user_message=str(exc) or default_message,
            technical_message=technical_message,
            context=context,
        )

    # Fallback for unknown exceptions
    logger.warning(f"Unknown exception type: {type(exc).__name__}: {exc}")
    return SystemError(
        code=ErrorCode.UNKNOWN,
        user_message="An unexpected error occurred",
        technical_message=f"{type(exc).__name__}: {exc}",
        context=context,
    )


def from_exception(exc: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
    """Convert any exception to a BaseAppError (alias for map_exception)."""
    return map_exception(exc, context)
