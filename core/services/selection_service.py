"""Regex-based selection service decoupled from any UI toolkit.

The service operates on a simple accessor protocol so that the view-model
can expose the currently visible records and a selection sink.
"""

from __future__ import annotations

import re
from typing import Protocol

from core.models import PhotoRecord

FIELD_FILE_NAME = "File Name"
FIELD_CATEGORY = "Category"
FIELD_TAGS = "Tags"
FIELD_SUMMARY = "Summary"
SELECT_FIELDS: list[str] = [FIELD_FILE_NAME, FIELD_CATEGORY, FIELD_TAGS, FIELD_SUMMARY]


class _SelectionAccessor(Protocol):
    """Abstracts the visible records and the selection state."""

    def iter_records(self) -> list[PhotoRecord]:
        """Return visible records in view order."""
        raise NotImplementedError

    def select(self, filenames: list[str]) -> int:
        """Add filenames to the selection; return how many were added."""
        raise NotImplementedError

    def unselect(self, filenames: list[str]) -> int:
        """Remove filenames from the selection; return how many were removed."""
        raise NotImplementedError


def field_text(record: PhotoRecord, field_name: str) -> str:
    """Return the text of `field_name` for `record`."""
    if field_name == FIELD_FILE_NAME:
        return record.filename
    if field_name == FIELD_CATEGORY:
        return record.category or ""
    if field_name == FIELD_TAGS:
        return record.tags or ""
    if field_name == FIELD_SUMMARY:
        return record.summary or ""
    raise ValueError(f"Unknown field: {field_name}")


class RegexSelectionService:
    """Apply selection/unselection on visible records via regular expressions."""

    def __init__(self, accessor: _SelectionAccessor) -> None:
        self._acc = accessor

    def apply(self, field: str, regex: str, select: bool) -> int:
        """Apply selection for records whose `field` matches `regex`.

        Args:
            field: Field name to inspect (e.g., "File Name").
            regex: Regular expression to match; invalid patterns raise `re.error`.
            select: If True, add matches to the selection; otherwise remove them.

        Returns:
            Number of records whose selection state changed.
        """
        rx = re.compile(regex)
        matches = [
            r.filename for r in self._acc.iter_records() if rx.search(field_text(r, field))
        ]
        if not matches:
            return 0
        return self._acc.select(matches) if select else self._acc.unselect(matches)
