"""Gallery state synchronizer.

Reconciles full-snapshot feed deliveries with the local optimistic overlays
(selection, in-flight processing, in-flight removal). The feed alone decides
which records exist; overlays only annotate records that the feed still
lists. The rendered view is derived by a pure merge over the current state,
so the order in which snapshots and overlay changes arrive does not matter.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import time

from loguru import logger

from core.models import STATUS_PENDING, STATUSES, PhotoRecord, RemovalKind


@dataclass(frozen=True)
class PhotoView:
    """A feed record annotated with its transient UI state."""

    record: PhotoRecord
    is_selected: bool = False
    is_processing: bool = False
    removing: RemovalKind | None = None

    @property
    def filename(self) -> str:
        return self.record.filename

    @property
    def is_busy(self) -> bool:
        return self.is_processing or self.removing is not None


@dataclass(frozen=True)
class _RemovingEntry:
    kind: RemovalKind
    since: float


def merge_view(
    records: Iterable[PhotoRecord],
    selected: set[str] | frozenset[str],
    processing: set[str] | frozenset[str],
    removing: dict[str, RemovalKind],
) -> list[PhotoView]:
    """Annotate `records` with overlay state without changing membership or order."""
    return [
        PhotoView(
            record=r,
            is_selected=r.filename in selected,
            is_processing=r.filename in processing,
            removing=removing.get(r.filename),
        )
        for r in records
    ]


class GallerySynchronizer:
    """Owns feed snapshots and overlays; the only place they are mutated."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._feeds: dict[str, list[PhotoRecord]] = {s: [] for s in STATUSES}
        self._received: set[str] = set()
        self._selected: set[str] = set()
        self._processing: set[str] = set()
        self._removing: dict[str, _RemovingEntry] = {}

    # Feed

    def on_feed_snapshot(self, status: str, records: Iterable[PhotoRecord]) -> list[str]:
        """Replace the authoritative list for `status` and reconcile overlays.

        Removing entries are purged once their filename is gone from every
        feed; `review` entries once it has left `pending`. Returns the purged
        filenames.
        """
        if status not in self._feeds:
            raise ValueError(f"Unknown feed status: {status}")
        self._feeds[status] = list(records)
        self._received.add(status)

        present = self._present_filenames()
        still_pending = {r.filename for r in self._feeds[STATUS_PENDING]}
        confirmed = [
            f
            for f, e in self._removing.items()
            if f not in (still_pending if e.kind == RemovalKind.REVIEW else present)
        ]
        for f in confirmed:
            del self._removing[f]
        if confirmed:
            logger.debug("Removal confirmed by feed: {}", confirmed)

        vanished = self._selected - present
        if vanished:
            self._selected -= vanished
        return confirmed

    def has_snapshot(self, status: str) -> bool:
        return status in self._received

    def records(self, status: str) -> list[PhotoRecord]:
        return list(self._feeds.get(status, []))

    def find(self, filename: str) -> PhotoRecord | None:
        for records in self._feeds.values():
            for r in records:
                if r.filename == filename:
                    return r
        return None

    def view(self, status: str, records: Iterable[PhotoRecord] | None = None) -> list[PhotoView]:
        """Records of `status` (or a filtered subset of them) with overlay state."""
        source = self._feeds.get(status, []) if records is None else records
        return merge_view(
            source,
            frozenset(self._selected),
            frozenset(self._processing),
            {f: e.kind for f, e in self._removing.items()},
        )

    # Processing overlay

    def begin_processing(self, filenames: Iterable[str]) -> list[str]:
        """Mark filenames as being analyzed; returns the newly marked ones.

        The removing overlay is not consulted: callers keep the two
        overlays exclusive per filename.
        """
        added: list[str] = []
        for f in filenames:
            if f in self._processing:
                continue
            self._processing.add(f)
            self._selected.discard(f)
            added.append(f)
        return added

    def end_processing(self, filename: str) -> None:
        self._processing.discard(filename)

    def is_processing(self, filename: str) -> bool:
        return filename in self._processing

    # Removing overlay

    def begin_removing(self, filenames: Iterable[str], kind: RemovalKind) -> list[str]:
        """Mark a whole batch as in-flight removal and drop it from the selection."""
        now = self._clock()
        batch = list(dict.fromkeys(filenames))
        for f in batch:
            self._removing[f] = _RemovingEntry(kind=RemovalKind(kind), since=now)
            self._selected.discard(f)
        return batch

    def rollback_removing(self, filenames: Iterable[str]) -> None:
        """Drop filenames from the removing overlay after an outright batch failure."""
        for f in filenames:
            self._removing.pop(f, None)

    def expire_removing(self, max_age_s: float, now: float | None = None) -> list[str]:
        """Force-clear removing entries older than `max_age_s` seconds."""
        if max_age_s <= 0:
            return []
        now = self._clock() if now is None else now
        stale = [f for f, e in self._removing.items() if now - e.since >= max_age_s]
        for f in stale:
            del self._removing[f]
        if stale:
            logger.warning("Cleared {} stale removing entries: {}", len(stale), stale)
        return stale

    def removing_kind(self, filename: str) -> RemovalKind | None:
        entry = self._removing.get(filename)
        return entry.kind if entry else None

    # Selection

    def is_selectable(self, filename: str) -> bool:
        return (
            filename in self._present_filenames()
            and filename not in self._processing
            and filename not in self._removing
        )

    def toggle_selection(self, filename: str) -> bool:
        """Toggle `filename`; returns the new selected state."""
        if filename in self._selected:
            self._selected.discard(filename)
            return False
        if not self.is_selectable(filename):
            return False
        self._selected.add(filename)
        return True

    def select(self, filenames: Iterable[str]) -> int:
        count = 0
        for f in filenames:
            if f not in self._selected and self.is_selectable(f):
                self._selected.add(f)
                count += 1
        return count

    def unselect(self, filenames: Iterable[str]) -> int:
        count = 0
        for f in filenames:
            if f in self._selected:
                self._selected.discard(f)
                count += 1
        return count

    def clear_selection(self) -> None:
        self._selected.clear()

    def selected_filenames(self) -> list[str]:
        """Selected filenames in feed order (pending first, then reviewed)."""
        ordered = [
            r.filename for s in STATUSES for r in self._feeds[s] if r.filename in self._selected
        ]
        return ordered

    # Overlay snapshots (read-only copies)

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    @property
    def processing(self) -> frozenset[str]:
        return frozenset(self._processing)

    @property
    def removing(self) -> dict[str, RemovalKind]:
        return {f: e.kind for f, e in self._removing.items()}

    def _present_filenames(self) -> set[str]:
        return {r.filename for records in self._feeds.values() for r in records}
