"""
Tests for the ErrorHandler singleton and context redaction.
"""

import sys
from unittest.mock import Mock, patch

from formcore.error_handler import ErrorHandler, get_error_handler, log_directory, redact_context
from formcore.errors import ErrorCode, ErrorType, FetchError, SchemaError, ValidationError


class TestRedactContext:
    def test_field_values_are_redacted(self):
        safe = redact_context({"field_value": "52998224725", "field": "cpf"})
        assert safe == {"field_value": "[REDACTED]", "field": "cpf"}

    def test_identifiers_in_text_are_masked(self):
        safe = redact_context({"detail": "rejected 529.982.247-25 and 11.222.333/0001-81"})
        assert safe["detail"] == "rejected [ID] and [ID]"

    def test_record_id_is_kept(self):
        assert redact_context({"record_id": "42"}) == {"record_id": "42"}

    def test_long_text_is_shortened(self):
        safe = redact_context({"body": "x" * 500})
        assert safe["body"] == "x" * 200 + "..."

    def test_non_text_values_are_kept(self):
        assert redact_context({"status": 404}) == {"status": 404}


class TestErrorHandler:
    def test_singleton(self):
        assert get_error_handler() is get_error_handler()
        assert ErrorHandler() is get_error_handler()

    def test_log_directory_is_named_logs(self):
        assert log_directory().name == "logs"

    def test_handle_emits_signal(self, qtbot):
        handler = get_error_handler()
        received = Mock()
        handler.errorOccurred.connect(received)
        try:
            error = handler.handle(FetchError(ErrorCode.FETCH_FAILED, "Could not load", record_id="9"))
        finally:
            handler.errorOccurred.disconnect(received)

        received.assert_called_once_with(error)
        assert error.record_id == "9"

    def test_handle_normalizes_plain_exceptions(self):
        error = get_error_handler().handle(RuntimeError("boom"), {"record_id": "3"})
        assert error.type is ErrorType.SYSTEM
        assert error.context["record_id"] == "3"
        assert "RuntimeError: boom" in error.context["traceback"]

    def test_context_is_merged_into_app_errors(self):
        error = get_error_handler().capture(SchemaError("Bad schema", path="form.json"), {"source": "startup"})
        assert error.context["path"] == "form.json"
        assert error.context["source"] == "startup"

    def test_fetch_failures_are_logged_as_warnings(self):
        handler = get_error_handler()
        with patch.object(handler, "_error_log") as error_log:
            handler.handle(FetchError(ErrorCode.TIMEOUT, "Too slow", record_id="5"))

        error_log.warning.assert_called_once()
        assert error_log.warning.call_args.kwargs["extra"] == {"app_code": "TIMEOUT", "record_id": "5"}

    def test_validation_failures_are_logged_at_debug(self):
        handler = get_error_handler()
        with patch.object(handler, "_error_log") as error_log:
            handler.handle(ValidationError(ErrorCode.INVALID_FORMAT, "Invalid CPF", field="cpf"))

        error_log.debug.assert_called_once()
        error_log.error.assert_not_called()

    def test_user_message(self):
        handler = get_error_handler()
        assert handler.to_user_message(FetchError(ErrorCode.TIMEOUT, "Too slow", record_id="8")) == (
            "Record 8: Too slow You can try again."
        )
        assert handler.to_user_message(ValidationError(ErrorCode.INVALID_FORMAT, "Invalid CPF")) == "Invalid CPF"

    def test_exception_hook_routes_to_handler(self):
        handler = get_error_handler()
        original = sys.excepthook
        handler.install_hooks()
        try:
            with patch.object(handler, "handle") as handle:
                error = RuntimeError("unhandled")
                sys.excepthook(RuntimeError, error, None)
            handle.assert_called_once_with(error, {"source": "sys.excepthook"})
        finally:
            handler.restore_hooks()

        assert sys.excepthook is original

    def test_restore_without_install_keeps_hook(self):
        original = sys.excepthook
        get_error_handler().restore_hooks()
        assert sys.excepthook is original
