"""
Tests for field validation: blur validation, input clearing and form folding.
"""

from unittest.mock import Mock

from PySide6.QtCore import QEvent
from PySide6.QtGui import QFocusEvent
from PySide6.QtWidgets import QApplication, QLabel, QLineEdit

from formcore.fields import FieldDeclaration, FieldKind
from formcore.patterns import compile_masks
from formcore.validators import REQUIRED_MESSAGE
from formgui.form.form_field import FormField
from formgui.masking.mask_registry import MaskRegistry
from formgui.utils.styling import has_error_marker
from formgui.validation.field_validation import FieldValidationController, ValidationState, check_field


def build_fields(qtbot, declarations):
    masks = MaskRegistry()
    fields = {}
    for declaration in declarations:
        widget = QLineEdit()
        widget.setObjectName(declaration.name)
        qtbot.addWidget(widget)
        fields[declaration.name] = FormField(declaration, widget, QLabel(), QLabel(), masks)
    masks.initialize({name: f.widget for name, f in fields.items()}, compile_masks(declarations))
    return fields


def blur(widget):
    QApplication.sendEvent(widget, QFocusEvent(QEvent.Type.FocusOut))


class TestCheckField:
    def test_required_check_runs_first(self, qtbot):
        fields = build_fields(qtbot, [FieldDeclaration(name="email", kind=FieldKind.EMAIL, required=True)])
        outcome = check_field(fields["email"])
        assert outcome.state is ValidationState.INVALID
        assert outcome.message == REQUIRED_MESSAGE

    def test_whitespace_only_required_value_is_missing(self, qtbot):
        fields = build_fields(qtbot, [FieldDeclaration(name="name", required=True)])
        fields["name"].widget.setText("   ")
        assert check_field(fields["name"]).message == REQUIRED_MESSAGE

    def test_format_check(self, qtbot):
        fields = build_fields(qtbot, [FieldDeclaration(name="email", kind=FieldKind.EMAIL)])
        fields["email"].widget.setText("not-an-email")
        outcome = check_field(fields["email"])
        assert outcome.message == "Invalid email"

    def test_empty_optional_field_is_valid(self, qtbot):
        fields = build_fields(qtbot, [FieldDeclaration(name="cpf", kind=FieldKind.NATIONAL_ID_PERSON)])
        assert check_field(fields["cpf"]).is_valid

    def test_empty_masked_required_field_is_missing(self, qtbot):
        fields = build_fields(
            qtbot, [FieldDeclaration(name="cep", kind=FieldKind.POSTAL_CODE, required=True, mask_pattern="99999-999")]
        )
        assert check_field(fields["cep"]).message == REQUIRED_MESSAGE

    def test_kind_none_always_passes_format(self, qtbot):
        fields = build_fields(qtbot, [FieldDeclaration(name="notes")])
        fields["notes"].widget.setText("anything at all")
        assert check_field(fields["notes"]).is_valid


class TestFieldValidationController:
    def _controller(self, qtbot, declarations):
        fields = build_fields(qtbot, declarations)
        controller = FieldValidationController()
        for field in fields.values():
            controller.register_field(field)
        return controller, fields

    def test_registered_fields_start_unvalidated(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])
        assert controller.field_names == ["name"]
        assert controller.outcome("name").state is ValidationState.UNVALIDATED
        assert fields["name"].client_error.isHidden()

    def test_invalid_field_renders_error(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="email", kind=FieldKind.EMAIL)])
        field = fields["email"]
        field.widget.setText("bad")

        assert not controller.validate_field("email")
        assert not field.client_error.isHidden()
        assert field.client_error.text() == "Invalid email"
        assert has_error_marker(field.widget)

    def test_valid_field_clears_error(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="email", kind=FieldKind.EMAIL)])
        field = fields["email"]
        field.widget.setText("bad")
        controller.validate_field("email")

        field.widget.setText("ana@example.com")
        assert controller.validate_field("email")
        assert field.client_error.isHidden()
        assert not has_error_marker(field.widget)

    def test_validity_signal(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])
        with qtbot.waitSignal(controller.fieldValidityChanged) as blocker:
            controller.validate_field("name")
        assert blocker.args == ["name", False, REQUIRED_MESSAGE]

    def test_validate_form_renders_every_field(self, qtbot):
        controller, fields = self._controller(
            qtbot,
            [
                FieldDeclaration(name="name", required=True),
                FieldDeclaration(name="email", kind=FieldKind.EMAIL, required=True),
            ],
        )
        fields["email"].widget.setText("ana@example.com")

        assert not controller.validate_form()

        shown = [name for name, field in fields.items() if not field.client_error.isHidden()]
        assert shown == ["name"]
        assert not has_error_marker(fields["email"].widget)
        assert controller.first_invalid() == "name"

    def test_validate_form_valid(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])
        fields["name"].widget.setText("Ana")
        assert controller.validate_form()
        assert controller.first_invalid() is None

    def test_blur_triggers_validation(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])

        blur(fields["name"].widget)

        assert controller.outcome("name").state is ValidationState.INVALID
        assert not fields["name"].client_error.isHidden()

    def test_input_clears_error_without_revalidating(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="email", kind=FieldKind.EMAIL)])
        field = fields["email"]
        field.widget.setText("bad")
        controller.validate_field("email")
        validated = Mock()
        controller.fieldValidityChanged.connect(validated)

        # still invalid after the edit, but the error is hidden until the next blur
        field.widget.textEdited.emit("bad2")

        assert field.client_error.isHidden()
        assert not has_error_marker(field.widget)
        assert controller.outcome("email").state is ValidationState.UNVALIDATED
        validated.assert_not_called()

    def test_typing_clears_error(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])
        controller.validate_field("name")

        qtbot.keyClicks(fields["name"].widget, "A")

        assert fields["name"].client_error.isHidden()

    def test_clear_all_validation(self, qtbot):
        controller, fields = self._controller(
            qtbot, [FieldDeclaration(name="a", required=True), FieldDeclaration(name="b", required=True)]
        )
        controller.validate_form()

        controller.clear_all_validation()

        assert all(f.client_error.isHidden() for f in fields.values())
        assert all(not has_error_marker(f.widget) for f in fields.values())

    def test_client_error_hides_server_error(self, qtbot):
        controller, fields = self._controller(qtbot, [FieldDeclaration(name="name", required=True)])
        controller.show_server_errors({"name": "Name already taken", "unknown": "ignored"})
        field = fields["name"]
        assert not field.server_error.isHidden()
        assert field.server_error.text() == "Name already taken"

        controller.validate_field("name")

        assert field.server_error.isHidden()
        assert not field.client_error.isHidden()
