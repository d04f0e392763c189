from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
)

from core.models import RemovalKind


class ConfirmDialog(QDialog):
    """Confirmation listing the photos a batch action will touch.

    Destructive actions require ticking an acknowledgement box first.
    """

    def __init__(
        self,
        title: str,
        message: str,
        filenames: list[str],
        action_label: str,
        destructive: bool = False,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)

        root = QVBoxLayout(self)
        root.addWidget(QLabel(message))
        root.addWidget(QLabel(f"Photos: {len(filenames)}"))

        lst = QListWidget()
        for name in filenames:
            lst.addItem(QListWidgetItem(name))
        root.addWidget(lst)

        self._confirm_box = QCheckBox("I understand this cannot be undone")
        if destructive:
            warn = QLabel("Warning: files are removed from storage permanently.")
            warn.setStyleSheet("color: #b00020; font-weight: bold;")
            root.addWidget(warn)
            root.addWidget(self._confirm_box)
        else:
            self._confirm_box.setChecked(True)

        btns = QHBoxLayout()
        self.btn_ok = QPushButton(action_label)
        self.btn_cancel = QPushButton("Cancel")
        btns.addWidget(self.btn_ok)
        btns.addStretch(1)
        btns.addWidget(self.btn_cancel)
        root.addLayout(btns)

        self.btn_ok.clicked.connect(self._on_accept)
        self.btn_cancel.clicked.connect(self.reject)

    @classmethod
    def for_removal(cls, kind: RemovalKind, filenames: list[str], parent=None) -> ConfirmDialog:
        if kind == RemovalKind.DELETE:
            return cls(
                "Confirm Delete",
                "Delete the selected reviewed photos and their reports?",
                filenames,
                "Delete",
                destructive=True,
                parent=parent,
            )
        return cls(
            "Confirm Discard",
            "Discard the selected pending photos without analyzing them?",
            filenames,
            "Discard",
            destructive=False,
            parent=parent,
        )

    def _on_accept(self) -> None:
        if not self._confirm_box.isChecked():
            return
        self.accept()
