"""
Error dialogs for the record form.

Failures that abort an action (a record that could not be loaded, an
unreadable schema) are shown as blocking message boxes; field-level
validation errors are rendered inline by the form instead.
"""

from __future__ import annotations

import logging
from enum import Enum

from PySide6.QtCore import QObject, QThread, QTimer, Signal
from PySide6.QtWidgets import QAbstractButton, QApplication, QMessageBox, QStatusBar, QWidget

from formcore.error_handler import get_error_handler
from formcore.errors import BaseAppError, ErrorCode, ErrorSeverity, ErrorType

ERROR_TITLES = {
    ErrorType.VALIDATION: "Invalid Input",
    ErrorType.FETCH: "Record Not Loaded",
    ErrorType.CONFIG: "Configuration Error",
    ErrorType.SYSTEM: "Unexpected Error",
}

REMEDIATIONS = {
    ErrorCode.FETCH_FAILED: "Check that the record server is reachable.",
    ErrorCode.HTTP_STATUS: "The server rejected the request. Check the record identifier.",
    ErrorCode.INVALID_RESPONSE: "The server answered with data the form cannot read.",
    ErrorCode.TIMEOUT: "The server took too long to answer. Try again later.",
    ErrorCode.SCHEMA_INVALID: "Fix the form schema file and restart the application.",
}


class DialogAction(Enum):
    RETRY = "retry"
    CLOSE = "close"


class ErrorDialogManager(QObject):
    """
    Shows error notices on behalf of the form.

    Signals:
        retryRequested(object): the error the user chose to retry
    """

    retryRequested = Signal(object)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._parent_widget = parent
        self._logger = logging.getLogger(__name__)

        self._status_bar: QStatusBar | None = None
        if parent is not None and hasattr(parent, "statusBar"):
            self._status_bar = parent.statusBar()

    def show_error(self, app_error: BaseAppError, parent: QWidget | None = None) -> DialogAction:
        """
        Show a blocking notice for ``app_error``.

        Retriable errors get a Retry button next to Close.

        Returns:
            The action chosen by the user
        """
        app_instance = QApplication.instance()
        if app_instance and QThread.currentThread() != app_instance.thread():
            QTimer.singleShot(0, lambda: self._show_error_main_thread(app_error, parent))
            return DialogAction.CLOSE

        return self._show_error_main_thread(app_error, parent)

    def _show_error_main_thread(self, app_error: BaseAppError, parent: QWidget | None = None) -> DialogAction:
        msg_box = self.build_message_box(app_error, parent)

        buttons: dict[QAbstractButton, DialogAction] = {}
        if app_error.retriable:
            buttons[msg_box.addButton("Retry", QMessageBox.ButtonRole.AcceptRole)] = DialogAction.RETRY
        close_button = msg_box.addButton("Close", QMessageBox.ButtonRole.RejectRole)
        buttons[close_button] = DialogAction.CLOSE
        msg_box.setDefaultButton(close_button)

        msg_box.exec()

        clicked = msg_box.clickedButton()
        action = buttons.get(clicked, DialogAction.CLOSE) if clicked else DialogAction.CLOSE
        if action is DialogAction.RETRY:
            self.retryRequested.emit(app_error)
        return action

    def build_message_box(self, app_error: BaseAppError, parent: QWidget | None = None) -> QMessageBox:
        """Create the message box describing ``app_error`` without showing it."""
        msg_box = QMessageBox(parent or self._parent_widget)
        msg_box.setWindowTitle(ERROR_TITLES.get(app_error.type, "Error"))
        msg_box.setText(get_error_handler().to_user_message(app_error))

        icon_map = {
            ErrorSeverity.LOW: QMessageBox.Icon.Information,
            ErrorSeverity.MEDIUM: QMessageBox.Icon.Warning,
            ErrorSeverity.HIGH: QMessageBox.Icon.Critical,
            ErrorSeverity.CRITICAL: QMessageBox.Icon.Critical,
        }
        msg_box.setIcon(icon_map.get(app_error.severity, QMessageBox.Icon.Warning))

        remediation = REMEDIATIONS.get(app_error.code)
        if remediation:
            msg_box.setInformativeText(remediation)
        if app_error.technical_message:
            msg_box.setDetailedText(app_error.technical_message)
        return msg_box

    def show_status_notification(self, message: str, timeout: int = 3000) -> None:
        """Show a non-blocking message in the parent's status bar, if any."""
        if self._status_bar:
            self._status_bar.showMessage(message, timeout)
        else:
            self._logger.info(f"Status: {message}")
