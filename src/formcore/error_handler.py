"""
Error capture and log files for the record form.

The ErrorHandler singleton turns any exception into a BaseAppError, writes it
to a rotating log under the application data directory and announces it
through ``errorOccurred`` so the UI can react.
"""

from __future__ import annotations

import logging
import logging.handlers
import re
import sys
import traceback
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

from PySide6.QtCore import QObject, QStandardPaths, Signal

from .config import APP_NAME
from .errors import BaseAppError, ErrorType, FetchError, from_exception

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ERROR_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(app_code)s | record=%(record_id)s | %(message)s"
ERROR_LOG_FILE = "record-form.log"
ERROR_LOG_MAX_BYTES = 1_048_576
ERROR_LOG_BACKUPS = 3

# Context keys whose values can hold what the user typed into the form
PERSONAL_CONTEXT_KEYS = ("value", "payload")
MAX_CONTEXT_TEXT = 200

# Personal (11 digit) and entity (14 digit) identifiers, formatted or not
IDENTIFIER_PATTERN = re.compile(r"\b\d{2,3}\.?\d{3}\.?\d{3}(?:/?\d{4})?-?\d{2}\b")


def log_directory() -> Path:
    """Directory that holds the rotating error log."""
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    if not base:
        base = str(Path.home() / f".{APP_NAME.lower()}")
    return Path(base) / "logs"


def redact_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """
    Copy ``context`` so that it can be written to the log.

    Entries that may carry field contents are dropped to a marker, national
    identifiers inside text are masked and long texts are shortened.
    """
    safe: dict[str, Any] = {}
    for key, value in context.items():
        if any(marker in key.lower() for marker in PERSONAL_CONTEXT_KEYS):
            safe[key] = "[REDACTED]"
            continue
        if not isinstance(value, str):
            safe[key] = value
            continue
        text = IDENTIFIER_PATTERN.sub("[ID]", value)
        safe[key] = text if len(text) <= MAX_CONTEXT_TEXT else text[:MAX_CONTEXT_TEXT] + "..."
    return safe


class ErrorHandler(QObject):
    """
    Process-wide error sink.

    Signals:
        errorOccurred(object): every BaseAppError passed through ``handle``
    """

    errorOccurred = Signal(object)

    _instance: ClassVar[ErrorHandler | None] = None

    def __new__(cls) -> ErrorHandler:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return

        super().__init__()
        self._initialized = True
        self._previous_hook: Any = None
        self._error_log = self._open_error_log()

    def capture(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Normalize ``exception`` into a BaseAppError.

        The redacted ``context`` is merged into the error's own context and a
        formatted traceback is attached for the log.
        """
        safe_context = redact_context(context or {})
        app_error = from_exception(exception, safe_context)
        for key, value in safe_context.items():
            app_error.context.setdefault(key, value)

        if not app_error.technical_message:
            app_error.technical_message = f"{type(exception).__name__}: {exception}"
        app_error.context.setdefault("traceback", "".join(traceback.format_exception(exception)))
        return app_error

    def handle(self, exception: Exception, context: dict[str, Any] | None = None) -> BaseAppError:
        """
        Capture ``exception``, log it and emit ``errorOccurred``.

        Field validation failures are ordinary user input and go to the log
        at debug level; a record that could not be fetched is a warning;
        anything else is logged as an error with its traceback.
        """
        if isinstance(exception, SystemExit | KeyboardInterrupt):
            raise exception

        app_error = self.capture(exception, context)
        extra = {
            "app_code": app_error.code.value,
            "record_id": app_error.context.get("record_id", "-"),
        }
        message = app_error.user_message
        if app_error.technical_message:
            message = f"{message} ({app_error.technical_message})"

        if app_error.type is ErrorType.VALIDATION:
            self._error_log.debug(message, extra=extra)
        elif app_error.type is ErrorType.FETCH:
            self._error_log.warning(message, extra=extra)
        else:
            self._error_log.error(message, extra=extra, exc_info=exception)

        self.errorOccurred.emit(app_error)
        return app_error

    def to_user_message(self, app_error: BaseAppError) -> str:
        """Text shown to the user for ``app_error``."""
        message = app_error.user_message
        if isinstance(app_error, FetchError) and app_error.record_id:
            message = f"Record {app_error.record_id}: {message}"
        if app_error.retriable:
            message += " You can try again."
        return message

    def install_hooks(self) -> None:
        """Route unhandled exceptions through ``handle``."""
        if self._previous_hook is None:
            self._previous_hook = sys.excepthook
        sys.excepthook = self._excepthook

    def restore_hooks(self) -> None:
        """Put back the exception hook that was active before ``install_hooks``."""
        if self._previous_hook is not None:
            sys.excepthook = self._previous_hook
            self._previous_hook = None

    def _excepthook(self, exc_type: type[BaseException], exc_value: BaseException, exc_traceback: Any) -> None:
        if not isinstance(exc_value, Exception):
            (self._previous_hook or sys.__excepthook__)(exc_type, exc_value, exc_traceback)
            return
        self.handle(exc_value, {"source": "sys.excepthook"})

    def _open_error_log(self) -> logging.Logger:
        error_log = logging.getLogger("record_form.error_log")
        error_log.setLevel(logging.DEBUG)
        error_log.propagate = False
        if error_log.handlers:
            return error_log

        formatter = logging.Formatter(ERROR_LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        try:
            directory = log_directory()
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                directory / ERROR_LOG_FILE,
                maxBytes=ERROR_LOG_MAX_BYTES,
                backupCount=ERROR_LOG_BACKUPS,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            error_log.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Cannot write the error log, reporting to the console only: {e}")

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        error_log.addHandler(console_handler)
        return error_log


def get_error_handler() -> ErrorHandler:
    """Return the process-wide ErrorHandler."""
    return ErrorHandler()


def setup_error_handling() -> ErrorHandler:
    """Install the unhandled exception hook; pair with ``restore_hooks`` on exit."""
    handler = get_error_handler()
    handler.install_hooks()
    return handler


def init_logging(level: str = "INFO") -> None:
    """Configure console logging and open the error log."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    get_error_handler()
    logger.debug(f"Error log directory: {log_directory()}")
