from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)
from loguru import logger

from core.services.interfaces import UploadSummary
from infrastructure.upload_service import ENTRY_DONE, ENTRY_ERROR, KIND_RAW, UploadQueue

FILE_FILTER = "Photos (*.jpg *.jpeg *.JPG *.JPEG *.arw *.ARW)"
_STATUS_TEXT = {
    "pending": "Queued",
    "uploading": "Uploading…",
    "done": "Done",
    "error": "Error",
}


class UploadDialog(QDialog):
    """Queue local JPEG/RAW files and upload them through the signed-URL flow."""

    progressChanged = Signal(int, int)  # entry index, percent

    def __init__(
        self,
        upload_service: Any,
        runner: Any,
        on_finished: Callable[[UploadSummary], None] | None = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Upload Photos")
        self.resize(640, 420)
        self._service = upload_service
        self._runner = runner
        self._on_finished = on_finished
        self.queue = UploadQueue()
        self._busy = False

        root = QVBoxLayout(self)
        self.summary_label = QLabel("")
        root.addWidget(self.summary_label)

        self.table = QTableWidget(0, 4)
        self.table.setHorizontalHeaderLabels(["File", "Type", "Progress", "Status"])
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table)

        btns = QHBoxLayout()
        self.btn_add = QPushButton("Add Files…")
        self.btn_remove = QPushButton("Remove")
        self.btn_clear = QPushButton("Clear")
        self.btn_upload = QPushButton("Upload")
        self.btn_close = QPushButton("Close")
        for b in (self.btn_add, self.btn_remove, self.btn_clear):
            btns.addWidget(b)
        btns.addStretch(1)
        btns.addWidget(self.btn_upload)
        btns.addWidget(self.btn_close)
        root.addLayout(btns)

        self.btn_add.clicked.connect(self._on_add)
        self.btn_remove.clicked.connect(self._on_remove)
        self.btn_clear.clicked.connect(self._on_clear)
        self.btn_upload.clicked.connect(self.start_upload)
        self.btn_close.clicked.connect(self.accept)
        self.progressChanged.connect(self._on_progress)
        self._rebuild()

    # Queue editing

    def add_paths(self, paths: list[str]) -> None:
        added = self.queue.add_files(paths)
        skipped = len(paths) - len(added)
        if skipped:
            logger.info("Upload queue skipped {} duplicate/unsupported file(s)", skipped)
        self._rebuild()

    def _on_add(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Select Photos", "", FILE_FILTER)
        if paths:
            self.add_paths(paths)

    def _on_remove(self) -> None:
        rows = sorted({i.row() for i in self.table.selectedIndexes()}, reverse=True)
        for row in rows:
            self.queue.remove(row)
        self._rebuild()

    def _on_clear(self) -> None:
        self.queue.clear()
        self._rebuild()

    # Upload

    def start_upload(self) -> None:
        if self._busy or not self.queue.remaining():
            return
        self._set_busy(True)
        self._runner.submit(
            lambda: self._service.upload_all(self.queue, self.progressChanged.emit),
            self._on_upload_done,
            label="upload",
        )

    def _on_progress(self, index: int, percent: int) -> None:
        bar = self.table.cellWidget(index, 2)
        if isinstance(bar, QProgressBar):
            bar.setValue(percent)
        self._refresh_status(index)

    def _on_upload_done(self, summary: Any, error: Any) -> None:
        self._set_busy(False)
        self._rebuild()
        if error is not None:
            logger.error("Upload run failed: {}", error)
            summary = UploadSummary()
        if self._on_finished is not None:
            self._on_finished(summary)

    # Rendering

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        for b in (self.btn_add, self.btn_remove, self.btn_clear, self.btn_upload):
            b.setEnabled(not busy)

    def _rebuild(self) -> None:
        entries = self.queue.entries
        self.table.setRowCount(len(entries))
        for row, entry in enumerate(entries):
            self.table.setItem(row, 0, QTableWidgetItem(entry.filename))
            kind_label = "RAW" if entry.kind == KIND_RAW else "JPEG"
            self.table.setItem(row, 1, QTableWidgetItem(kind_label))
            bar = QProgressBar()
            bar.setRange(0, 100)
            bar.setValue(entry.progress)
            self.table.setCellWidget(row, 2, bar)
            self._refresh_status(row)
        done = sum(1 for e in entries if e.status == ENTRY_DONE)
        failed = sum(1 for e in entries if e.status == ENTRY_ERROR)
        self.summary_label.setText(
            f"{self.queue.jpeg_count} JPEG · {self.queue.raw_count} RAW · "
            f"{done} done · {failed} error(s)"
        )
        self.btn_upload.setEnabled(not self._busy and bool(self.queue.remaining()))

    def _refresh_status(self, row: int) -> None:
        if not 0 <= row < len(self.queue.entries):
            return
        entry = self.queue.entries[row]
        text = _STATUS_TEXT.get(entry.status, entry.status)
        if entry.error:
            text = f"{text}: {entry.error}"
        self.table.setItem(row, 3, QTableWidgetItem(text))
