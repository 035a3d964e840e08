"""
Per-field and whole-form validation for the record form.

Fields are validated when they lose focus; typing into a field only hides
its error, the field is re-validated on the next blur.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from PySide6.QtCore import QEvent, QObject, Signal

from formcore.error_handler import get_error_handler
from formcore.errors import ErrorCode, ValidationError
from formcore.validators import FORMAT_MESSAGES, REQUIRED_MESSAGE, validate_value
from formgui.form.form_field import FormField
from formgui.utils.styling import set_error_marker


class ValidationState(Enum):
    UNVALIDATED = auto()
    VALID = auto()
    INVALID = auto()


@dataclass(frozen=True)
class ValidationOutcome:
    """Latest validation result of one field."""

    state: ValidationState
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.state is not ValidationState.INVALID


UNVALIDATED = ValidationOutcome(ValidationState.UNVALIDATED)
VALID = ValidationOutcome(ValidationState.VALID)


def check_field(field: FormField) -> ValidationOutcome:
    """Run the required check, then the format check of the field's kind."""
    value = field.value()
    kind = field.declaration.kind

    if field.required and not value.strip():
        return ValidationOutcome(ValidationState.INVALID, REQUIRED_MESSAGE)

    if value.strip() and not validate_value(kind, value, field.required):
        return ValidationOutcome(ValidationState.INVALID, FORMAT_MESSAGES[kind])

    return VALID


class FieldValidationController(QObject):
    """
    Validates registered fields and renders their error state.

    Fields are kept in registration order, which is the field declaration
    order of the form.
    """

    fieldValidityChanged = Signal(str, bool, str)  # name, valid, message

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self._fields: dict[str, FormField] = {}
        self._outcomes: dict[str, ValidationOutcome] = {}
        self._error_handler = get_error_handler()

    def register_field(self, field: FormField) -> None:
        """
        Register a field and wire its events.

        Blur triggers validation; user input only clears the error.
        """
        self._fields[field.name] = field
        self._outcomes[field.name] = UNVALIDATED

        field.widget.installEventFilter(self)
        field.widget.textEdited.connect(lambda _text, name=field.name: self.clear_error(name))

        field.client_error.hide()
        field.server_error.hide()

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.Type.FocusOut:
            name = watched.objectName()
            if name in self._fields and self._fields[name].widget is watched:
                self.validate_field(name)
        return super().eventFilter(watched, event)

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def outcome(self, name: str) -> ValidationOutcome:
        return self._outcomes.get(name, UNVALIDATED)

    def validate_field(self, name: str) -> bool:
        """
        Validate one field and render the result.

        Returns:
            True if the field is valid
        """
        field = self._fields[name]
        outcome = check_field(field)
        self._outcomes[name] = outcome

        if outcome.is_valid:
            self._render_clear(field)
        else:
            self._render_error(field, outcome.message)
            code = (
                ErrorCode.REQUIRED_FIELD_MISSING if outcome.message == REQUIRED_MESSAGE else ErrorCode.INVALID_FORMAT
            )
            self._error_handler.handle(
                ValidationError(
                    code=code,
                    user_message=outcome.message,
                    field=name,
                    context={"kind": field.declaration.kind.value},
                )
            )

        self.fieldValidityChanged.emit(name, outcome.is_valid, outcome.message)
        return outcome.is_valid

    def validate_form(self) -> bool:
        """
        Validate every field in declaration order.

        Every field is validated (not only up to the first failure) so the
        error state of the whole form is up to date afterwards.
        """
        results = [self.validate_field(name) for name in self._fields]
        return all(results)

    def first_invalid(self) -> str | None:
        """Name of the first field whose latest outcome is invalid."""
        return next((name for name, outcome in self._outcomes.items() if not outcome.is_valid), None)

    def clear_error(self, name: str) -> None:
        """Hide both error slots of a field regardless of its validity."""
        field = self._fields.get(name)
        if field is None:
            return
        self._outcomes[name] = UNVALIDATED
        self._render_clear(field)

    def clear_all_validation(self) -> None:
        for name in self._fields:
            self.clear_error(name)

    def show_server_errors(self, errors: dict[str, str]) -> None:
        """Show errors reported by the server for the given fields."""
        for name, message in errors.items():
            field = self._fields.get(name)
            if field is None:
                self._logger.warning(f"Server reported an error for unknown field '{name}'")
                continue
            field.server_error.setText(message)
            field.server_error.show()
            set_error_marker(field.widget, True)

    def _render_error(self, field: FormField, message: str) -> None:
        # Client-side errors take precedence over a stale server error
        field.server_error.hide()
        field.client_error.setText(message)
        field.client_error.show()
        set_error_marker(field.widget, True)

    def _render_clear(self, field: FormField) -> None:
        field.server_error.hide()
        field.client_error.hide()
        set_error_marker(field.widget, False)
