"""Lightweight view model wrapper around `PhotoView`."""

from __future__ import annotations

from dataclasses import dataclass

from core.models import RemovalKind
from core.services.analytics import format_score, score_band
from core.services.gallery_sync import PhotoView
from infrastructure.utils import format_display_date

_REMOVING_LABELS = {
    RemovalKind.DISCARD: "Discarding…",
    RemovalKind.DELETE: "Deleting…",
    RemovalKind.REVIEW: "Analyzed",
}


@dataclass
class PhotoVM:
    """Expose convenient properties for bindings/templates."""

    view: PhotoView

    @property
    def filename(self) -> str:
        return self.view.filename

    @property
    def score_text(self) -> str:
        """Score with one decimal, empty for unscored records."""
        score = self.view.record.score
        return "" if score is None else format_score(score)

    @property
    def score_band(self) -> str | None:
        """Band name (high/mid/low); None for unscored records."""
        score = self.view.record.score
        return None if score is None else score_band(score)

    @property
    def category_label(self) -> str:
        return (self.view.record.category or "").capitalize()

    @property
    def tags(self) -> list[str]:
        return self.view.record.tag_list

    @property
    def uploaded_text(self) -> str:
        return format_display_date(self.view.record.uploaded_at)

    @property
    def state_label(self) -> str:
        """Overlay badge text; empty when the card is idle."""
        if self.view.is_processing:
            return "Analyzing…"
        if self.view.removing is not None:
            return _REMOVING_LABELS.get(self.view.removing, "")
        return ""

    @property
    def is_checkable(self) -> bool:
        """False while any overlay makes the card non-selectable."""
        return not self.view.is_busy

    @property
    def tooltip(self) -> str:
        record = self.view.record
        lines = [record.filename]
        if record.score is not None:
            lines.append(f"Score: {format_score(record.score)}")
        if record.summary:
            lines.append(record.summary)
        return "\n".join(lines)
