"""
Threading system for non-blocking record fetches.

This module provides a QThread-based worker that loads one record for edit
mode without freezing the UI, and a controller that owns the workers and
decides which result is allowed to reach the form.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot

from .errors import ErrorCode, FetchError, FETCH_FAILED_MESSAGE
from .record_source import RecordSource

logger = logging.getLogger(__name__)


class RecordFetchWorker(QThread):
    """
    QThread-based worker running a single record fetch.

    Exactly one terminal signal is emitted per run.

    Signals:
        recordLoaded(int, str, dict): request token, record id and record data
        fetchFailed(int, str, object): request token, record id and FetchError
    """

    recordLoaded = Signal(int, str, dict)
    fetchFailed = Signal(int, str, object)

    def __init__(self, source: RecordSource, record_id: str, token: int, *, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.record_id = record_id
        self.token = token
        self._source = source
        self.setObjectName(f"RecordFetchWorker-{token}")

    def run(self) -> None:
        """Fetch the record in the worker thread and report the outcome."""
        try:
            result = self._source.fetch(self.record_id)
        except Exception as e:
            logger.error(f"Unexpected error while fetching record {self.record_id}")
            self.fetchFailed.emit(
                self.token,
                self.record_id,
                FetchError(
                    code=ErrorCode.FETCH_FAILED,
                    user_message=FETCH_FAILED_MESSAGE,
                    record_id=self.record_id,
                    technical_message=f"{type(e).__name__}: {e}",
                ),
            )
            return

        if result.success and result.record is not None:
            self.recordLoaded.emit(self.token, self.record_id, result.record)
        else:
            self.fetchFailed.emit(self.token, self.record_id, result.error)


class RecordFetchController(QObject):
    """
    Manages the lifecycle of RecordFetchWorker threads.

    Every request gets an increasing token. A newer request supersedes all
    older ones: results of superseded requests are discarded, so the form
    always ends up showing the last requested record.
    """

    fetchStarted = Signal(str)
    recordLoaded = Signal(str, dict)
    fetchFailed = Signal(str, object)

    def __init__(self, source: RecordSource, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._source = source
        self._token = 0
        self._workers: dict[int, RecordFetchWorker] = {}
        self.setObjectName("RecordFetchController")
        logger.debug("RecordFetchController initialized.")

    @property
    def current_token(self) -> int:
        return self._token

    def is_running(self) -> bool:
        """Check if any fetch is still in flight."""
        return any(worker.isRunning() for worker in self._workers.values())

    @Slot(str)
    def fetch(self, record_id: str) -> None:
        """Start fetching ``record_id``, superseding any pending request."""
        self._token += 1
        token = self._token

        worker = RecordFetchWorker(self._source, record_id, token, parent=self)
        worker.recordLoaded.connect(self._on_worker_loaded, Qt.ConnectionType.QueuedConnection)
        worker.fetchFailed.connect(self._on_worker_failed, Qt.ConnectionType.QueuedConnection)
        worker.finished.connect(self._on_worker_finished, Qt.ConnectionType.QueuedConnection)
        self._workers[token] = worker

        logger.info(f"Started fetch #{token} for record {record_id}")
        self.fetchStarted.emit(record_id)
        worker.start()

    def cancel_pending(self) -> None:
        """Invalidate every in-flight request without waiting for it."""
        self._token += 1
        logger.debug("Pending record fetches invalidated")

    def _is_current(self, token: int) -> bool:
        return token == self._token

    @Slot(int, str, dict)
    def _on_worker_loaded(self, token: int, record_id: str, record: dict) -> None:
        if not self._is_current(token):
            logger.info(f"Discarding superseded fetch #{token} for record {record_id}")
            return
        self.recordLoaded.emit(record_id, record)

    @Slot(int, str, object)
    def _on_worker_failed(self, token: int, record_id: str, error: object) -> None:
        if not self._is_current(token):
            logger.info(f"Ignoring failure of superseded fetch #{token} for record {record_id}")
            return
        self.fetchFailed.emit(record_id, error)

    @Slot()
    def _on_worker_finished(self) -> None:
        """Release the worker whose thread just finished."""
        worker = self.sender()
        if isinstance(worker, RecordFetchWorker):
            self._cleanup_worker(worker.token)

    def _cleanup_worker(self, token: int) -> None:
        """
        Release a finished worker.

        Its signals are disconnected first so that no late emission reaches
        a controller that is being torn down.
        """
        worker = self._workers.pop(token, None)
        if worker is None:
            return
        try:
            worker.recordLoaded.disconnect(self._on_worker_loaded)
            worker.fetchFailed.disconnect(self._on_worker_failed)
            worker.finished.disconnect(self._on_worker_finished)
        except (RuntimeError, TypeError):
            logger.debug(f"Signals of {worker.objectName()} already disconnected.")
        if worker.isRunning():
            worker.wait(1000)
        worker.deleteLater()
        logger.debug(f"Worker {worker.objectName()} scheduled for deletion.")

    @Slot()
    def shutdown(self, timeout_ms: int = 3000) -> None:
        """Wait for in-flight fetches and release every worker before quitting."""
        self.cancel_pending()
        for token, worker in list(self._workers.items()):
            if worker.isRunning() and not worker.wait(timeout_ms):
                logger.warning(f"Worker {worker.objectName()} did not finish within {timeout_ms}ms during shutdown.")
            self._cleanup_worker(token)
        self._source.close()
