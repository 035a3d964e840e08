"""
Record form widget.

Builds one labelled input per declared field together with its client and
server error slots, owns the input masks and the field validation
controller, and renders the create/edit session (title, submit text,
hidden identifier, cancel button).
"""

from __future__ import annotations

import logging

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from formcore.config import FormConfig
from formcore.fields import FieldDeclaration, FormSchema, InputType
from formcore.form_session import FormSession
from formcore.patterns import compile_masks
from formcore.submission import Submission, build_submission, id_field_name
from formgui.form.form_field import FormField
from formgui.masking.mask_registry import MaskRegistry
from formgui.utils.styling import FORM_STYLESHEET
from formgui.validation.field_validation import FieldValidationController

DEFAULT_TITLE = "New record"
DEFAULT_SUBMIT_TEXT = "Save"
CANCEL_TEXT = "Cancel"


class RecordForm(QWidget):
    """Form for creating or editing one record described by a FormSchema."""

    submitRequested = Signal(object)  # Submission
    sessionChanged = Signal(object)  # FormSession

    def __init__(
        self,
        schema: FormSchema,
        config: FormConfig | None = None,
        parent: QWidget | None = None,
        title: str = DEFAULT_TITLE,
        submit_text: str = DEFAULT_SUBMIT_TEXT,
    ) -> None:
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self.schema = schema
        self.config = config or FormConfig()
        self.setObjectName("recordForm")
        self.setStyleSheet(FORM_STYLESHEET)

        self.masks = MaskRegistry(self.config.mask_blank_char)
        self.validation = FieldValidationController(self)
        self._fields: dict[str, FormField] = {}

        self._build_ui(title, submit_text)

        self.masks.initialize(
            {name: field.widget for name, field in self._fields.items()},
            compile_masks(schema.visible_fields),
        )
        for field in self._fields.values():
            self.validation.register_field(field)

        self.session = FormSession.initial(self.config, title, submit_text)
        self.apply_session(self.session)

        self.submit_button.clicked.connect(self.submit)

    def _build_ui(self, title: str, submit_text: str) -> None:
        layout = QVBoxLayout(self)

        self.title_label = QLabel(title)
        self.title_label.setObjectName("formTitle")
        layout.addWidget(self.title_label)

        self.id_input = QLineEdit()
        self.id_input.setObjectName(id_field_name(self.schema))
        self.id_input.setVisible(False)
        layout.addWidget(self.id_input)

        form_layout = QFormLayout()
        for declaration in self.schema.visible_fields:
            field = self._create_field(declaration)
            self._fields[declaration.name] = field

            cell = QVBoxLayout()
            cell.setSpacing(2)
            cell.addWidget(field.widget)
            cell.addWidget(field.client_error)
            cell.addWidget(field.server_error)
            label = QLabel(declaration.display_label + (" *" if declaration.required else ""))
            label.setBuddy(field.widget)
            form_layout.addRow(label, cell)
        layout.addLayout(form_layout)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.cancel_button = QPushButton(CANCEL_TEXT)
        self.cancel_button.setObjectName("cancelButton")
        buttons.addWidget(self.cancel_button)
        self.submit_button = QPushButton(submit_text)
        self.submit_button.setObjectName("submitButton")
        self.submit_button.setDefault(True)
        buttons.addWidget(self.submit_button)
        layout.addLayout(buttons)

    def _create_field(self, declaration: FieldDeclaration) -> FormField:
        widget = QLineEdit()
        widget.setObjectName(declaration.name)
        if declaration.input_type is InputType.DATE and not declaration.mask_pattern:
            widget.setPlaceholderText("YYYY-MM-DD")

        client_error = QLabel()
        client_error.setObjectName(f"error-js-{declaration.name}")
        client_error.setProperty("errorSlot", "client")

        server_error = QLabel()
        server_error.setObjectName(f"error-backend-{declaration.name}")
        server_error.setProperty("errorSlot", "server")

        return FormField(declaration, widget, client_error, server_error, self.masks)

    # Field access

    @property
    def fields(self) -> dict[str, FormField]:
        return dict(self._fields)

    def field(self, name: str) -> FormField:
        return self._fields[name]

    def values(self) -> dict[str, str]:
        return {name: field.value() for name, field in self._fields.items()}

    def set_field_value(self, name: str, value: str) -> None:
        """Assign a value programmatically; the field's mask is re-rendered."""
        self._fields[name].set_value(value)

    def clear_values(self) -> None:
        for field in self._fields.values():
            field.clear()
        self.id_input.clear()

    # Session

    def apply_session(self, session: FormSession) -> None:
        """Render the create/edit session on the form."""
        self.session = session
        self.title_label.setText(session.title_text)
        self.submit_button.setText(session.submit_text)
        self.id_input.setText(session.record_id)
        self.cancel_button.setVisible(session.is_editing)
        self.sessionChanged.emit(session)

    def scroll_into_view(self) -> None:
        """Ask the enclosing scroll area, if any, to show the form."""
        parent = self.parentWidget()
        while parent is not None:
            if isinstance(parent, QScrollArea):
                parent.ensureWidgetVisible(self)
                return
            parent = parent.parentWidget()

    # Submission

    def submit(self) -> bool:
        """
        Validate the whole form and emit the submission if it is valid.

        When validation fails the first invalid field receives focus and
        nothing is submitted.
        """
        if not self.validation.validate_form():
            self._logger.warning("Form is invalid, submission blocked")
            first_invalid = self.validation.first_invalid()
            if first_invalid is not None:
                self._fields[first_invalid].widget.setFocus()
            return False

        submission: Submission = build_submission(self.schema, self.session, self.values())
        self._logger.info(f"Submitting form to {submission.target}")
        self.submitRequested.emit(submission)
        return True
