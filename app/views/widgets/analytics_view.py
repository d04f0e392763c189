"""Analytics tab: summary counters and tables (no chart rendering)."""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from app.views.constants import BAND_COLORS, CATEGORY_ICONS
from core.services.analytics import AnalyticsReport, RankedPhoto, format_score, score_band

EMPTY_TEXT = "Not enough data to show analytics.\nAnalyze some photos first."


def _table(headers: list[str]) -> QTableWidget:
    table = QTableWidget(0, len(headers))
    table.setHorizontalHeaderLabels(headers)
    table.verticalHeader().setVisible(False)
    table.setEditTriggers(QTableWidget.NoEditTriggers)
    table.horizontalHeader().setStretchLastSection(True)
    return table


def _fill(table: QTableWidget, rows: list[list[str]], band_col: int | None = None) -> None:
    table.setRowCount(len(rows))
    for r, row in enumerate(rows):
        for c, text in enumerate(row):
            item = QTableWidgetItem(text)
            if band_col is not None and c == band_col:
                item.setForeground(QColor(BAND_COLORS[score_band(float(text or 0))]))
            table.setItem(r, c, item)


def _category_label(category: str) -> str:
    return f"{CATEGORY_ICONS.get(category, '')} {category}".strip()


def _ranked_row(p: RankedPhoto) -> list[str]:
    return [p.filename, p.category, format_score(p.score)]


class AnalyticsView(QWidget):
    """Shows an `AnalyticsReport`, or the empty state when it has no data."""

    refreshRequested = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.status_label = QLabel("")
        self.btn_refresh = QPushButton("Refresh")
        bar.addWidget(self.status_label)
        bar.addStretch(1)
        bar.addWidget(self.btn_refresh)
        root.addLayout(bar)
        self.btn_refresh.clicked.connect(self.refreshRequested.emit)

        self.stack = QStackedWidget()
        self.empty_label = QLabel(EMPTY_TEXT)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.stack.addWidget(self.empty_label)

        content = QWidget()
        grid = QGridLayout(content)
        self.kpis = QLabel("")
        self.kpis.setWordWrap(True)
        grid.addWidget(self.kpis, 0, 0, 1, 2)

        self.distribution = _table(["Range", "Photos"])
        self.categories = _table(["Category", "Photos", "Average"])
        self.top5 = _table(["File", "Category", "Score"])
        self.bottom5 = _table(["File", "Category", "Score"])
        self.tags = _table(["Tag", "Count"])
        self.timeline = _table(["File", "Score", "Moving avg"])
        boxes = [
            ("Score distribution", self.distribution),
            ("Categories", self.categories),
            ("Top 5", self.top5),
            ("Bottom 5", self.bottom5),
            ("Top tags", self.tags),
            ("Timeline", self.timeline),
        ]
        for i, (title, table) in enumerate(boxes):
            box = QGroupBox(title)
            QVBoxLayout(box).addWidget(table)
            grid.addWidget(box, 1 + i // 2, i % 2)
        self.stack.addWidget(content)
        root.addWidget(self.stack, 1)

    def set_loading(self, loading: bool) -> None:
        self.status_label.setText("Loading analytics…" if loading else "")
        self.btn_refresh.setEnabled(not loading)

    def show_error(self, message: str) -> None:
        self.set_loading(False)
        self.status_label.setText(f"Could not load analytics: {message}")

    def show_report(self, report: AnalyticsReport) -> None:
        self.set_loading(False)
        if report.is_empty:
            self.stack.setCurrentIndex(0)
            return
        self.stack.setCurrentIndex(1)
        self.kpis.setText(
            f"Photos: {report.total}   ·   Average: {format_score(report.avg_score)}"
            f"   ·   Median: {format_score(report.median_score)}"
            f"   ·   Best: {format_score(report.best_score)}"
            f"   ·   Worst: {format_score(report.worst_score)}"
            f"   ·   Best of: {report.best_of_count} ({report.best_of_rate:.0f}%)"
        )
        _fill(self.distribution, [[b.label, str(b.count)] for b in report.distribution])
        _fill(
            self.categories,
            [
                [_category_label(c.category), str(c.count), format_score(c.avg)]
                for c in report.categories
            ],
            band_col=2,
        )
        _fill(self.top5, [_ranked_row(p) for p in report.top5], 2)
        _fill(self.bottom5, [_ranked_row(p) for p in report.bottom5], 2)
        _fill(self.tags, [[tag, str(count)] for tag, count in report.top_tags])
        _fill(
            self.timeline,
            [[p.filename, format_score(p.score), format_score(p.avg)] for p in report.timeline],
            band_col=1,
        )
