"""Filtering and sorting of feed records for the gallery tabs.

Sorting handles missing scores and timestamps without mutating the records;
records lacking the sort value always go last.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from core.models import ALL_CATEGORIES, PhotoRecord

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_BEST = "best"
SORT_WORST = "worst"
SORT_KEYS: tuple[str, ...] = (SORT_NEWEST, SORT_OLDEST, SORT_BEST, SORT_WORST)


class SortService:
    """Provides filter/sort utilities for `PhotoRecord` lists."""

    def filter(
        self, records: Iterable[PhotoRecord], category: str = ALL_CATEGORIES, search: str = ""
    ) -> list[PhotoRecord]:
        """Keep records matching `category` and containing `search`.

        The search is a case-insensitive substring test against the
        filename, tags, category and summary.
        """
        items = list(records)
        if category and category != ALL_CATEGORIES:
            items = [r for r in items if r.category == category]
        query = (search or "").strip().lower()
        if query:
            items = [
                r
                for r in items
                if query in r.filename.lower()
                or query in (r.tags or "").lower()
                or query in (r.category or "").lower()
                or query in (r.summary or "").lower()
            ]
        return items

    def sort(self, records: Iterable[PhotoRecord], sort_key: str) -> list[PhotoRecord]:
        """Return a new list ordered by `sort_key` (one of `SORT_KEYS`)."""
        items = list(records)
        if sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_key}")

        if sort_key in (SORT_BEST, SORT_WORST):
            scored = [r for r in items if r.score is not None]
            unscored = [r for r in items if r.score is None]
            scored.sort(key=lambda r: (r.score, r.filename), reverse=(sort_key == SORT_BEST))
            return scored + unscored

        # Upload time first, filename as tiebreak / fallback
        dated = [r for r in items if r.uploaded_at is not None]
        undated = [r for r in items if r.uploaded_at is None]
        newest = sort_key == SORT_NEWEST
        dated.sort(key=lambda r: (r.uploaded_at or datetime.min, r.filename), reverse=newest)
        undated.sort(key=lambda r: r.filename, reverse=newest)
        return dated + undated

    def apply(
        self,
        records: Iterable[PhotoRecord],
        category: str = ALL_CATEGORIES,
        search: str = "",
        sort_key: str = SORT_NEWEST,
    ) -> list[PhotoRecord]:
        """Filter then sort."""
        return self.sort(self.filter(records, category, search), sort_key)
