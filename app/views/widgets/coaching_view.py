"""Coaching tab: personalized feedback report."""

from __future__ import annotations

from html import escape

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QTextBrowser, QVBoxLayout, QWidget

from core.services.analytics import CoachingItem, CoachingReport

EMPTY_TEXT = "No coaching report yet. Press Generate to request one."


def _items_html(title: str, items: list[CoachingItem]) -> str:
    if not items:
        return ""
    rows = []
    for item in items:
        examples = f"<br><i>{escape(item.example_photos)}</i>" if item.example_photos else ""
        rows.append(f"<li><b>{escape(item.title)}</b>: {escape(item.detail)}{examples}</li>")
    return f"<h3>{escape(title)}</h3><ul>{''.join(rows)}</ul>"


def report_html(report: CoachingReport) -> str:
    """Render a coaching report as simple rich text."""
    parts: list[str] = []
    if report.level_summary:
        parts.append(f"<h2>{escape(report.level_summary)}</h2>")
    parts.append(_items_html("Strengths", report.strengths))
    parts.append(_items_html("Weaknesses", report.weaknesses))
    if report.error_pattern:
        parts.append(f"<h3>Error pattern</h3><p>{escape(report.error_pattern)}</p>")
    mission = report.weekly_mission
    if mission is not None:
        parts.append(
            f"<h3>Weekly mission: {escape(mission.title)}</h3>"
            f"<p>{escape(mission.description)}</p>"
            f"<p><b>Exercise:</b> {escape(mission.exercise)}</p>"
            f"<p><b>Suggested settings:</b> {escape(mission.suggested_settings)}</p>"
        )
    if report.sweet_spot:
        parts.append(f"<h3>Sweet spot</h3><p>{escape(report.sweet_spot)}</p>")
    if report.next_goal:
        parts.append(f"<h3>Next goal</h3><p>{escape(report.next_goal)}</p>")
    return "".join(parts)


class CoachingView(QWidget):
    generateRequested = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)
        bar = QHBoxLayout()
        self.status_label = QLabel("")
        self.btn_generate = QPushButton("Generate")
        bar.addWidget(self.status_label)
        bar.addStretch(1)
        bar.addWidget(self.btn_generate)
        root.addLayout(bar)
        self.browser = QTextBrowser()
        self.browser.setPlainText(EMPTY_TEXT)
        root.addWidget(self.browser, 1)
        self.btn_generate.clicked.connect(self.generateRequested.emit)

    def set_loading(self, loading: bool) -> None:
        self.status_label.setText("Generating coaching report…" if loading else "")
        self.btn_generate.setEnabled(not loading)

    def show_error(self, message: str) -> None:
        self.set_loading(False)
        self.status_label.setText(f"Could not generate report: {message}")

    def show_report(self, report: CoachingReport, cached: bool = False) -> None:
        self.set_loading(False)
        html = report_html(report)
        if not html:
            self.browser.setPlainText(EMPTY_TEXT)
            return
        self.browser.setHtml(html)
        self.status_label.setText(
            f"{report.pattern_count} pattern(s) detected" + (" (cached)" if cached else "")
        )
