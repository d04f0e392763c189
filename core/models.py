"""Core domain models for gallery photo records and feed pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

STATUS_PENDING = "pending"
STATUS_REVIEWED = "reviewed"
STATUSES: tuple[str, ...] = (STATUS_PENDING, STATUS_REVIEWED)

# Labels assigned by the scoring service
CATEGORIES: tuple[str, ...] = (
    "paisajes",
    "mascotas",
    "arquitectura",
    "personas",
    "comida",
    "otras",
)
ALL_CATEGORIES = "all"


class RemovalKind(str, Enum):
    """Why a record is in the removing overlay."""

    DISCARD = "discard"
    DELETE = "delete"
    # Analyzed photo waiting for the feed to move it out of "pending"
    REVIEW = "review"


@dataclass
class PhotoRecord:
    """A single photo document as mirrored from the live feed."""

    filename: str
    status: str
    score: float | None = None
    category: str | None = None
    tags: str = ""
    summary: str = ""
    best_of: bool = False
    uploaded_at: datetime | None = None
    original_url: str = ""
    raw_url: str = ""
    thumb_url: str = ""
    review_id: str | None = None

    @property
    def tag_list(self) -> list[str]:
        """Tags split on commas, stripped, empties dropped."""
        return [t.strip() for t in (self.tags or "").split(",") if t.strip()]

    @property
    def thumbnail_url(self) -> str:
        return self.thumb_url or self.original_url or ""

    @property
    def high_res_url(self) -> str:
        return self.original_url or self.thumb_url or ""

    @property
    def raw_download_url(self) -> str:
        return self.raw_url or ""


@dataclass
class GalleryPage:
    """One page of `/api/data`."""

    pending: list[PhotoRecord] = field(default_factory=list)
    reviewed: list[PhotoRecord] = field(default_factory=list)
    reviewed_total: int = 0
    reviewed_has_more: bool = False
