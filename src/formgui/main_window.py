"""
Main window hosting the record form.

The window wires the form to the record fetcher and the mode controller and
offers an "edit record" bar so a record can be loaded by identifier.
"""

import logging

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from formcore.config import FormConfig
from formcore.errors import BaseAppError, FetchError
from formcore.fields import FormSchema
from formcore.record_source import RecordSource
from formcore.submission import Submission
from formcore.threading import RecordFetchController
from formgui.dialogs.error_dialogs import ErrorDialogManager
from formgui.form.form_mode_controller import FormModeController
from formgui.form.record_form import RecordForm


class MainWindow(QMainWindow):
    """
    Main application window.

    Provides the record form together with the controls to load an existing
    record into it.
    """

    def __init__(
        self,
        schema: FormSchema,
        config: FormConfig | None = None,
        source: RecordSource | None = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        self.config = config or FormConfig()

        self.setWindowTitle(f"{schema.table_name.title() or 'Record'} records")
        self.resize(640, 720)

        self.form = RecordForm(schema, self.config)
        self.fetch_controller = RecordFetchController(source or RecordSource(self.config), self)
        self.error_dialogs = ErrorDialogManager(self)
        self.mode_controller = FormModeController(
            self.form, self.fetch_controller, self.config, notifier=self.error_dialogs, parent=self
        )

        self._setup_ui()
        self._connect_signals()

    def _setup_ui(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)

        edit_bar = QHBoxLayout()
        edit_bar.addWidget(QLabel("Record id:"))
        self.edit_id_input = QLineEdit()
        self.edit_id_input.setObjectName("editIdInput")
        self.edit_id_input.setPlaceholderText("Identifier of the record to edit")
        edit_bar.addWidget(self.edit_id_input)
        self.edit_button = QPushButton("Edit")
        self.edit_button.setObjectName("editButton")
        edit_bar.addWidget(self.edit_button)
        layout.addLayout(edit_bar)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setWidget(self.form)
        layout.addWidget(self.scroll_area)

        self.setCentralWidget(central)

    def _connect_signals(self) -> None:
        self.edit_button.clicked.connect(self._on_edit_clicked)
        self.edit_id_input.returnPressed.connect(self._on_edit_clicked)

        self.fetch_controller.fetchStarted.connect(
            lambda record_id: self.error_dialogs.show_status_notification(f"Loading record {record_id}...")
        )
        self.mode_controller.modeChanged.connect(self._on_mode_changed)
        self.error_dialogs.retryRequested.connect(self._on_retry_requested)
        self.form.submitRequested.connect(self._on_submit_requested)

    def start_edit(self, record_id: str) -> None:
        """Load ``record_id`` into the form for editing."""
        self.mode_controller.enter_edit(record_id)

    def _on_edit_clicked(self) -> None:
        self.start_edit(self.edit_id_input.text())

    def _on_mode_changed(self, session) -> None:
        self.error_dialogs.show_status_notification(session.title_text)

    def _on_retry_requested(self, app_error: BaseAppError) -> None:
        if isinstance(app_error, FetchError) and app_error.record_id:
            self.start_edit(app_error.record_id)

    def _on_submit_requested(self, submission: Submission) -> None:
        self._logger.info(f"Form submitted to {submission.target} with {len(submission.values)} values")
        self.error_dialogs.show_status_notification(f"Submitted to {submission.target}")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Wait for in-flight fetches before the window goes away."""
        self.fetch_controller.shutdown()
        super().closeEvent(event)
