"""
Create/edit mode state machine for the record form.

``enter_edit`` always starts from a clean Create state, then loads the
record in the background through a RecordFetchController. Only when the
fetch succeeds are the fields populated and the session switched to Edit.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from PySide6.QtCore import QObject, Signal, Slot

from formcore.config import FormConfig
from formcore.error_handler import get_error_handler
from formcore.errors import BaseAppError, ErrorCode, FetchError, FETCH_FAILED_MESSAGE
from formcore.fields import InputType
from formcore.form_session import enter_edit, reset
from formcore.patterns import format_value_by_mask
from formgui.form.record_form import RecordForm

logger = logging.getLogger(__name__)


class FailureNotifier(Protocol):
    """Anything able to surface an error to the user (e.g. ErrorDialogManager)."""

    def show_error(self, app_error: BaseAppError) -> Any: ...


def populated_value(input_type: InputType, raw: Any, mask_pattern: str = "") -> str:
    """
    Convert a fetched value into the text placed in a field.

    ``None`` becomes empty and other scalars are stringified. Date fields
    keep only the date part of a timestamp; values of masked fields are
    stored clean and get their formatting back here.
    """
    if raw is None:
        return ""
    text = str(raw)
    if input_type is InputType.DATE:
        return text.split("T", 1)[0]
    if mask_pattern:
        return format_value_by_mask(mask_pattern, text)
    return text


class FormModeController(QObject):
    """
    Switches a RecordForm between Create and Edit mode.

    The fetcher must expose ``fetch(record_id)``, ``cancel_pending()`` and the
    signals ``recordLoaded(str, dict)`` / ``fetchFailed(str, object)``; in the
    application this is a RecordFetchController.

    Signals:
        modeChanged(object): the new FormSession
        editFailed(str, object): record id and the FetchError
    """

    modeChanged = Signal(object)
    editFailed = Signal(str, object)

    def __init__(
        self,
        form: RecordForm,
        fetcher: Any,
        config: FormConfig | None = None,
        notifier: FailureNotifier | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.form = form
        self.config = config or form.config
        self._fetcher = fetcher
        self._notifier = notifier
        self._pending_id: str | None = None
        self._error_handler = get_error_handler()

        fetcher.recordLoaded.connect(self._on_record_loaded)
        fetcher.fetchFailed.connect(self._on_fetch_failed)
        form.cancel_button.clicked.connect(self.cancel_edit)

    @property
    def session(self):
        return self.form.session

    @property
    def pending_id(self) -> str | None:
        """Identifier whose fetch is awaited, if any."""
        return self._pending_id

    @Slot(str)
    def enter_edit(self, record_id: Any) -> None:
        """Start editing ``record_id``; the form stays in Create mode until the record arrives."""
        record_id = str(record_id).strip()
        self.cancel_edit()
        if not record_id:
            logger.warning("Edit requested without a record identifier")
            return

        self._pending_id = record_id
        logger.info(f"Loading record {record_id} for editing")
        self._fetcher.fetch(record_id)

    @Slot()
    def cancel_edit(self) -> None:
        """Return to a pristine Create state. Safe to call repeatedly."""
        if self._pending_id is not None:
            self._fetcher.cancel_pending()
            self._pending_id = None

        self.form.clear_values()
        self.form.validation.clear_all_validation()
        self.form.masks.resynchronize_all()
        self._apply(reset(self.form.session))

    @Slot(str, dict)
    def _on_record_loaded(self, record_id: str, record: dict) -> None:
        if record_id != self._pending_id:
            logger.info(f"Ignoring record {record_id}, no longer requested")
            return
        self._pending_id = None

        for declaration in self.form.schema.visible_fields:
            if declaration.name not in record:
                continue
            value = populated_value(declaration.input_type, record[declaration.name], declaration.mask_pattern)
            self.form.set_field_value(declaration.name, value)

        self._apply(enter_edit(self.form.session, record_id, self.config))
        self.form.scroll_into_view()
        logger.info(f"Editing record {record_id}")

    @Slot(str, object)
    def _on_fetch_failed(self, record_id: str, error: object) -> None:
        if record_id != self._pending_id:
            return
        self._pending_id = None

        if not isinstance(error, FetchError):
            error = FetchError(
                code=ErrorCode.FETCH_FAILED,
                user_message=FETCH_FAILED_MESSAGE,
                record_id=record_id,
                technical_message=str(error),
            )
        self._error_handler.handle(error, {"record_id": record_id})
        self.editFailed.emit(record_id, error)
        if self._notifier is not None:
            self._notifier.show_error(error)

    def _apply(self, session) -> None:
        changed = session != self.form.session
        self.form.apply_session(session)
        if changed:
            self.modeChanged.emit(session)
