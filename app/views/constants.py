"""
UI/view constants centralized for reuse across view modules.

Only magic numbers, labels and item data roles live here.
"""

from __future__ import annotations

from PySide6.QtCore import Qt

from core.models import ALL_CATEGORIES, STATUS_PENDING, STATUS_REVIEWED
from core.services.sort_service import SORT_BEST, SORT_NEWEST, SORT_OLDEST, SORT_WORST

# Data roles
FILENAME_ROLE: int = Qt.UserRole  # filename key on every gallery item
THUMB_URL_ROLE: int = Qt.UserRole + 1
STATE_ROLE: int = Qt.UserRole + 2  # overlay badge text

# Top-level tabs (gallery statuses first, then reports)
TAB_ANALYTICS = "analytics"
TAB_COACHING = "coaching"
TABS: list[tuple[str, str]] = [
    (STATUS_PENDING, "Pending"),
    (STATUS_REVIEWED, "Reviewed"),
    (TAB_ANALYTICS, "Analytics"),
    (TAB_COACHING, "Coaching"),
]

CATEGORY_ICONS: dict[str, str] = {
    "paisajes": "🏔️",
    "mascotas": "🐾",
    "arquitectura": "🏛️",
    "personas": "👤",
    "comida": "🍽️",
    "otras": "📷",
}
CATEGORY_FILTERS: list[tuple[str, str]] = [(ALL_CATEGORIES, "All categories")] + [
    (key, f"{icon} {key.capitalize()}") for key, icon in CATEGORY_ICONS.items()
]

SORT_LABELS: list[tuple[str, str]] = [
    (SORT_NEWEST, "Newest first"),
    (SORT_OLDEST, "Oldest first"),
    (SORT_BEST, "Best score"),
    (SORT_WORST, "Worst score"),
]

BAND_COLORS: dict[str, str] = {
    "high": "#2e7d32",
    "mid": "#f9a825",
    "low": "#c62828",
}

# Grid / timing defaults (overridable by settings.json)
DEFAULT_THUMB_SIZE: int = 256
GRID_SPACING_PX: int = 8
LIGHTBOX_MAX_SIDE: int = 1600
DEFAULT_TOAST_TIMEOUT_MS: int = 3500
DEFAULT_SETTLE_DELAY_MS: int = 600
STALE_SWEEP_INTERVAL_MS: int = 10_000
