from __future__ import annotations

import re

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from core.services.selection_service import FIELD_FILE_NAME


class SelectDialog(QDialog):
    selectRequested = Signal(str, str)  # field, regex
    unselectRequested = Signal(str, str)  # field, regex

    def __init__(
        self, fields: list[str], parent=None, row_values: dict[str, str] | None = None
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Select by Field/Regex")
        self._fields = list(fields)
        self._row_values = dict(row_values or {})

        root = QVBoxLayout(self)

        row = QHBoxLayout()
        row.addWidget(QLabel("Field"))
        self.combo = QComboBox()
        self.combo.addItems(self._fields)
        row.addWidget(self.combo)
        root.addLayout(row)

        row2 = QHBoxLayout()
        row2.addWidget(QLabel("Regex"))
        self.regex = QLineEdit()
        self.regex.setPlaceholderText("e.g. ^DSC004\\d+\\.JPG$")
        row2.addWidget(self.regex)
        root.addLayout(row2)

        tips = QLabel(
            "Select or unselect the visible photos whose field matches.\n"
            "- Exact match: ^text$\n"
            "- Any text: .*\n"
            "- Digits: \\d+\n"
            "Examples: ^DSC00\\d+\\.JPG$ (file name), retrato|bokeh (tags)"
        )
        tips.setWordWrap(True)
        root.addWidget(tips)

        btns = QHBoxLayout()
        self.btn_select = QPushButton("Select")
        self.btn_unselect = QPushButton("Unselect")
        self.btn_close = QPushButton("Close")
        btns.addWidget(self.btn_select)
        btns.addWidget(self.btn_unselect)
        btns.addStretch(1)
        btns.addWidget(self.btn_close)
        root.addLayout(btns)

        self.btn_close.clicked.connect(self.accept)
        self.btn_select.clicked.connect(self._emit_select)
        self.btn_unselect.clicked.connect(self._emit_unselect)

        # Default regex: exact match of the highlighted photo's field, if any
        self._set_default_field(FIELD_FILE_NAME)
        self.combo.currentTextChanged.connect(self._on_field_changed)
        self._apply_exact_regex_for_current_field()

    def _emit_select(self) -> None:
        self.selectRequested.emit(self.combo.currentText(), self.regex.text())

    def _emit_unselect(self) -> None:
        self.unselectRequested.emit(self.combo.currentText(), self.regex.text())

    # Internals
    def _set_default_field(self, field_name: str) -> None:
        idx = self.combo.findText(field_name)
        if idx >= 0:
            self.combo.setCurrentIndex(idx)

    def _on_field_changed(self, _text: str) -> None:
        self._apply_exact_regex_for_current_field()

    def _apply_exact_regex_for_current_field(self) -> None:
        value = self._row_values.get(self.combo.currentText(), "")
        if value:
            self.regex.setText(f"^{re.escape(value)}$")
        else:
            # Leave blank to keep placeholder when no photo is highlighted
            self.regex.clear()
