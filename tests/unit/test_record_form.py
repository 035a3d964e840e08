"""
Tests for the RecordForm widget.
"""

from PySide6.QtWidgets import QLabel, QLineEdit, QScrollArea

from formcore.form_session import enter_edit
from formgui.form.record_form import RecordForm
from formgui.utils.styling import has_error_marker


class RecordingScrollArea(QScrollArea):
    def __init__(self):
        super().__init__()
        self.visible_requests = []

    def ensureWidgetVisible(self, widget, xmargin=50, ymargin=50):
        self.visible_requests.append(widget)


def make_form(qtbot, schema, form_config):
    form = RecordForm(schema, form_config, title="New customer", submit_text="Save")
    qtbot.addWidget(form)
    return form


def fill_valid(form):
    form.set_field_value("name", "Ana Souza")
    form.set_field_value("email", "ana@example.com")
    form.set_field_value("cpf", "52998224725")
    form.set_field_value("phone", "11987654321")


class TestRecordFormLayout:
    def test_widgets_are_addressable_by_field_name(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        assert isinstance(form.findChild(QLineEdit, "cpf"), QLineEdit)
        assert isinstance(form.findChild(QLabel, "error-js-cpf"), QLabel)
        assert isinstance(form.findChild(QLabel, "error-backend-cpf"), QLabel)
        assert list(form.fields) == ["name", "email", "cpf", "phone", "cep", "birth_date"]

    def test_identifier_field_is_hidden(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        assert form.id_input.objectName() == "id"
        assert form.id_input.isHidden()
        assert "id" not in form.fields

    def test_initial_create_state(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        assert form.title_label.text() == "New customer"
        assert form.submit_button.text() == "Save"
        assert form.cancel_button.isHidden()
        assert form.session.submit_target == "/customers/create"

    def test_masks_are_applied(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        assert "cpf" in form.masks
        assert "name" not in form.masks
        assert form.field("cep").widget.displayText() == "_____-___"

    def test_set_field_value_resynchronizes_mask(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        form.set_field_value("phone", "11987654321")
        form.set_field_value("cpf", "52998224725")

        assert form.field("phone").value() == "(11) 98765-4321"
        assert form.field("cpf").value() == "529.982.247-25"


class TestRecordFormSession:
    def test_apply_edit_session(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)

        form.apply_session(enter_edit(form.session, "42", form_config))

        assert form.title_label.text() == "Editing record #42"
        assert form.submit_button.text() == "Update"
        assert form.id_input.text() == "42"
        assert not form.cancel_button.isHidden()

    def test_scroll_into_view_uses_enclosing_scroll_area(self, qtbot, schema, form_config):
        scroll_area = RecordingScrollArea()
        qtbot.addWidget(scroll_area)
        form = RecordForm(schema, form_config)
        scroll_area.setWidget(form)

        form.scroll_into_view()

        assert scroll_area.visible_requests == [form]

    def test_scroll_into_view_without_scroll_area(self, qtbot, schema, form_config):
        make_form(qtbot, schema, form_config).scroll_into_view()


class TestRecordFormSubmit:
    def test_invalid_form_blocks_submission(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)
        form.set_field_value("cpf", "52998224700")

        with qtbot.assertNotEmitted(form.submitRequested):
            assert not form.submit()

        assert has_error_marker(form.field("name").widget)
        assert form.field("cpf").client_error.text() == "Invalid CPF"
        assert form.validation.first_invalid() == "name"

    def test_valid_form_emits_submission(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)
        fill_valid(form)

        with qtbot.waitSignal(form.submitRequested) as blocker:
            assert form.submit()

        submission = blocker.args[0]
        assert submission.target == "/customers/create"
        assert submission.values["id"] == ""
        assert submission.values["cpf"] == "52998224725"
        assert submission.values["phone"] == "11987654321"
        assert submission.values["cep"] == ""

    def test_submit_button_triggers_submission(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)
        fill_valid(form)

        with qtbot.waitSignal(form.submitRequested):
            form.submit_button.click()

    def test_clear_values(self, qtbot, schema, form_config):
        form = make_form(qtbot, schema, form_config)
        fill_valid(form)

        form.clear_values()

        assert all(value == "" for value in form.values().values())
