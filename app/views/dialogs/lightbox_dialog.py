from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, QUrl
from PySide6.QtGui import QDesktopServices, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTextBrowser,
    QVBoxLayout,
)

from app.viewmodels.photo_vm import PhotoVM
from app.views.constants import CATEGORY_ICONS
from core.services.gallery_sync import PhotoView

# Detail keys already shown in the header or not meant for display
_HIDDEN_DETAIL_KEYS = {
    "filename",
    "originalUrl",
    "rawUrl",
    "thumbUrl",
    "reviewId",
    "status",
    "resumen",
    "summary",
}


def format_detail(detail: dict[str, Any] | None) -> str:
    """Render a detail payload as `key: value` lines (nested lists joined)."""
    if not detail:
        return ""
    lines: list[str] = []
    for key, value in detail.items():
        if key in _HIDDEN_DETAIL_KEYS or value in (None, "", [], {}):
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        elif isinstance(value, dict):
            value = "; ".join(f"{k}={v}" for k, v in value.items())
        lines.append(f"{key}: {value}")
    return "\n".join(lines)


class LightboxDialog(QDialog):
    """Large view of one photo with its score, tags and review detail."""

    def __init__(self, view: PhotoView, parent=None) -> None:
        super().__init__(parent)
        vm = PhotoVM(view)
        record = view.record
        self.filename = record.filename
        self.setWindowTitle(record.filename)

        root = QVBoxLayout(self)

        self.image_label = QLabel("Loading…")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setMinimumSize(480, 360)
        root.addWidget(self.image_label, 1)

        header = [record.filename]
        if vm.score_text:
            header.append(f"★ {vm.score_text}")
        if record.category:
            header.append(f"{CATEGORY_ICONS.get(record.category, '')} {vm.category_label}")
        if record.best_of:
            header.append("Best of")
        if vm.uploaded_text:
            header.append(vm.uploaded_text)
        root.addWidget(QLabel("  ·  ".join(header)))

        if vm.tags:
            tags = QLabel(" ".join(f"#{t}" for t in vm.tags))
            tags.setWordWrap(True)
            root.addWidget(tags)

        self.detail = QTextBrowser()
        self.detail.setPlainText(record.summary)
        root.addWidget(self.detail)

        btns = QHBoxLayout()
        self.btn_original = QPushButton("Open Original")
        self.btn_raw = QPushButton("Download RAW")
        self.btn_close = QPushButton("Close")
        self.btn_original.setEnabled(bool(record.high_res_url))
        self.btn_raw.setEnabled(bool(record.raw_download_url))
        btns.addWidget(self.btn_original)
        btns.addWidget(self.btn_raw)
        btns.addStretch(1)
        btns.addWidget(self.btn_close)
        root.addLayout(btns)

        self.btn_original.clicked.connect(
            lambda: QDesktopServices.openUrl(QUrl(record.high_res_url))
        )
        self.btn_raw.clicked.connect(
            lambda: QDesktopServices.openUrl(QUrl(record.raw_download_url))
        )
        self.btn_close.clicked.connect(self.accept)
        self._summary = record.summary

    def set_image(self, image: Any) -> None:
        if image is None or image.isNull():
            self.image_label.setText("Image unavailable")
            return
        pix = QPixmap.fromImage(image)
        self.image_label.setPixmap(
            pix.scaled(self.image_label.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation)
        )

    def set_detail(self, detail: dict[str, Any] | None) -> None:
        """Append the review detail below the summary; None leaves the summary alone."""
        text = format_detail(detail)
        if not text:
            return
        self.detail.setPlainText("\n\n".join(t for t in (self._summary, text) if t))
