"""ViewModel owning the gallery state and orchestrating gateway workflows."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from core.models import (
    ALL_CATEGORIES,
    CATEGORIES,
    STATUS_PENDING,
    STATUS_REVIEWED,
    STATUSES,
    PhotoRecord,
    RemovalKind,
)
from core.services.analytics import AnalyticsReport, CoachingReport, GalleryStats
from core.services.gallery_sync import GallerySynchronizer, PhotoView
from core.services.interfaces import LEVEL_ERROR, LEVEL_WARNING, BatchResult, Notice
from core.services.selection_service import RegexSelectionService
from core.services.sort_service import SORT_KEYS, SORT_NEWEST, SortService
from infrastructure.cache_store import COACHING_REPORT_KEY, GALLERY_SNAPSHOT_KEY
from infrastructure.gateway_client import GatewayError
from infrastructure.photo_repository import record_to_payload, records_from_payload

DEFAULT_REMOVING_TIMEOUT_S = 120.0

_PAST_TENSE = {
    RemovalKind.DISCARD: "discarded",
    RemovalKind.DELETE: "deleted",
}


@dataclass
class AnalyzeRun:
    """Progress of one sequential batch analysis."""

    filenames: list[str]
    analyzed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def remaining(self) -> list[str]:
        handled = set(self.analyzed) | set(self.failed)
        return [f for f in self.filenames if f not in handled]

    @property
    def is_done(self) -> bool:
        return not self.remaining


class _VisibleAccessor:
    """Adapter exposing the visible records to `RegexSelectionService`."""

    def __init__(self, vm: MainVM) -> None:
        self._vm = vm

    def iter_records(self) -> list[PhotoRecord]:
        return self._vm.visible_records()

    def select(self, filenames: list[str]) -> int:
        return self._vm.sync.select(filenames)

    def unselect(self, filenames: list[str]) -> int:
        return self._vm.sync.unselect(filenames)


class MainVM:
    """Main application view-model.

    The only mutator of gallery UI state. Methods that talk to the gateway
    (`review_photo`, `discard`, `delete`, `load_analytics`, `load_coaching`,
    `fetch_detail`) block and are meant to run on a worker thread; the
    `begin_*`/`complete_*` steps around them run on the UI thread.
    """

    def __init__(
        self,
        gateway: Any,
        mutations: Any,
        sorter: SortService | None = None,
        cache: Any | None = None,
        removing_timeout_s: float = DEFAULT_REMOVING_TIMEOUT_S,
        default_sort: str = SORT_NEWEST,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Create a MainVM.

        Args:
            gateway: Gateway with `fetch_analytics`, `fetch_coaching`, `fetch_detail`.
            mutations: `MutationService` (review/discard/delete with audit log).
            sorter: Filtering/sorting service (defaults to `SortService`).
            cache: Optional `CacheStore` for first paint and coaching.
            removing_timeout_s: Age after which a stuck removing entry is cleared.
            default_sort: Initial sort key for the reviewed tab.
            clock: Monotonic clock used for overlay timestamps.
        """
        self._gateway = gateway
        self._mutations = mutations
        self._sorter = sorter or SortService()
        self._cache = cache
        self._removing_timeout_s = float(removing_timeout_s)
        self.sync = GallerySynchronizer(clock=clock)
        self.tab = STATUS_PENDING
        self.search = ""
        self.category = ALL_CATEGORIES
        self.sort_key = default_sort if default_sort in SORT_KEYS else SORT_NEWEST
        self._slow_connection = False
        # Statuses delivered by the live feed, as opposed to seeded from cache
        self._live: set[str] = set()

    # Feed

    def on_feed_snapshot(self, status: str, records: Iterable[PhotoRecord]) -> list[str]:
        """Apply a full snapshot; returns filenames whose removal the feed confirmed."""
        confirmed = self.sync.on_feed_snapshot(status, records)
        self._live.add(status)
        if self._cache is not None and self._live.issuperset(STATUSES):
            self._cache.set(
                GALLERY_SNAPSHOT_KEY,
                {s: [record_to_payload(r) for r in self.sync.records(s)] for s in STATUSES},
            )
        return confirmed

    def on_feed_timeout(self) -> Notice:
        self._slow_connection = True
        return Notice("Slow connection: the gallery is taking longer than usual", LEVEL_WARNING)

    def load_cached_snapshot(self) -> bool:
        """Seed the feeds from the local cache; only statuses not yet delivered."""
        if self._cache is None:
            return False
        data = self._cache.get(GALLERY_SNAPSHOT_KEY)
        if not isinstance(data, dict):
            return False
        loaded = False
        for status in STATUSES:
            if self.sync.has_snapshot(status) or status not in data:
                continue
            self.sync.on_feed_snapshot(status, records_from_payload(data[status] or [], status))
            loaded = True
        if loaded:
            logger.info("Gallery seeded from cache")
        return loaded

    @property
    def is_loading(self) -> bool:
        """True until a snapshot (or the slow-connection timeout) arrived for the tab."""
        return not self.sync.has_snapshot(self.tab) and not self._slow_connection

    # Tabs and filters

    def set_tab(self, tab: str) -> None:
        if tab not in STATUSES:
            raise ValueError(f"Unknown tab: {tab}")
        if tab != self.tab:
            self.tab = tab
            self.sync.clear_selection()

    def set_search(self, text: str) -> None:
        self.search = text or ""

    def set_category(self, category: str) -> None:
        if category != ALL_CATEGORIES and category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        self.category = category

    def set_sort(self, sort_key: str) -> None:
        if sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_key}")
        self.sort_key = sort_key

    def search_tag(self, tag: str) -> None:
        """Show the reviewed photos carrying `tag`; tags only filter that tab."""
        self.set_tab(STATUS_REVIEWED)
        self.set_search(tag.strip().lstrip("#"))

    def visible_records(self) -> list[PhotoRecord]:
        """Records of the active tab after filters; pending keeps feed order."""
        records = self.sync.records(self.tab)
        if self.tab == STATUS_PENDING:
            return records
        return self._sorter.apply(records, self.category, self.search, self.sort_key)

    def visible_items(self) -> list[PhotoView]:
        return self.sync.view(self.tab, self.visible_records())

    def stats(self) -> GalleryStats:
        return GalleryStats.from_records(
            self.sync.records(STATUS_PENDING), self.sync.records(STATUS_REVIEWED)
        )

    # Selection

    def toggle_select(self, filename: str) -> bool:
        return self.sync.toggle_selection(filename)

    def select_all(self) -> int:
        """Select every visible, selectable record of the active tab."""
        return self.sync.select(r.filename for r in self.visible_records())

    def clear_selection(self) -> None:
        self.sync.clear_selection()

    def selected_filenames(self) -> list[str]:
        return self.sync.selected_filenames()

    @property
    def selection_count(self) -> int:
        return len(self.sync.selected)

    def apply_regex_selection(self, field_name: str, pattern: str, select: bool) -> int:
        """Select or unselect visible records whose field matches `pattern`.

        Raises:
            re.error: When `pattern` is not a valid regular expression.
        """
        return RegexSelectionService(_VisibleAccessor(self)).apply(field_name, pattern, select)

    # Analyze

    def begin_analyze(self) -> AnalyzeRun | None:
        """Move the selected pending photos into the processing overlay."""
        pending = {r.filename for r in self.sync.records(STATUS_PENDING)}
        candidates = [f for f in self.sync.selected_filenames() if f in pending]
        filenames = self.sync.begin_processing(candidates)
        if not filenames:
            return None
        logger.info("Analyze started for {} photo(s)", len(filenames))
        return AnalyzeRun(filenames=filenames)

    def review_photo(self, filename: str) -> dict[str, Any]:
        """Blocking review call."""
        return self._mutations.review(filename)

    def complete_review(
        self, run: AnalyzeRun, filename: str, error: BaseException | str | None = None
    ) -> Notice | None:
        """Clear the processing overlay; on success hide the card until the feed moves it."""
        self.sync.end_processing(filename)
        if error is not None:
            run.failed.append(filename)
            logger.error("Analyze failed for {}: {}", filename, error)
            return Notice(f"Analysis failed for {filename}: {error}", LEVEL_ERROR)
        run.analyzed.append(filename)
        if any(r.filename == filename for r in self.sync.records(STATUS_PENDING)):
            self.sync.begin_removing([filename], RemovalKind.REVIEW)
        return None

    def finish_analyze(self, run: AnalyzeRun) -> Notice:
        message = f"{len(run.analyzed)} photo(s) analyzed"
        if not run.failed:
            return Notice(message)
        message = f"{message} · {len(run.failed)} error(s)"
        return Notice(message, LEVEL_WARNING if run.analyzed else LEVEL_ERROR)

    # Discard / delete

    def begin_discard(self) -> list[str]:
        return self._begin_removal(RemovalKind.DISCARD)

    def begin_delete(self) -> list[str]:
        return self._begin_removal(RemovalKind.DELETE)

    def removal_candidates(self, kind: RemovalKind) -> list[str]:
        """Selected filenames a discard (pending) or delete (reviewed) would target."""
        status = STATUS_PENDING if RemovalKind(kind) == RemovalKind.DISCARD else STATUS_REVIEWED
        present = {r.filename for r in self.sync.records(status)}
        return [f for f in self.sync.selected_filenames() if f in present]

    def _begin_removal(self, kind: RemovalKind) -> list[str]:
        targets = self.removal_candidates(kind)
        if not targets:
            return []
        return self.sync.begin_removing(targets, kind)

    def discard(self, filenames: list[str]) -> BatchResult:
        """Blocking discard call."""
        return self._mutations.discard(filenames)

    def delete(self, filenames: list[str]) -> BatchResult:
        """Blocking delete call."""
        return self._mutations.delete(filenames)

    def complete_removal(
        self,
        kind: RemovalKind,
        filenames: list[str],
        result: BatchResult | None = None,
        error: BaseException | str | None = None,
    ) -> Notice:
        """Report a finished batch; an outright failure rolls the overlay back.

        On success the overlay is left alone: entries disappear when the feed
        drops their records, and unconfirmed entries linger until the feed
        or `expire_stale_removing` clears them.
        """
        verb = _PAST_TENSE.get(RemovalKind(kind), str(kind))
        if error is not None or result is None:
            self.sync.rollback_removing(filenames)
            logger.error("Batch {} failed: {}", RemovalKind(kind).value, error)
            return Notice(f"Could not complete: {error or 'no response'}", LEVEL_ERROR)
        message = f"{result.succeeded} photo(s) {verb}"
        if result.is_partial:
            return Notice(f"{message} · {result.error_count} error(s)", LEVEL_WARNING)
        return Notice(message)

    def expire_stale_removing(self, now: float | None = None) -> list[str]:
        return self.sync.expire_removing(self._removing_timeout_s, now)

    # Analytics, coaching, detail

    def load_analytics(self) -> AnalyticsReport:
        """Blocking analytics fetch; an empty report renders the empty state."""
        return AnalyticsReport.from_payload(self._gateway.fetch_analytics())

    def load_coaching(self) -> CoachingReport:
        """Blocking coaching fetch; the payload is cached for the next start."""
        payload = self._gateway.fetch_coaching()
        if self._cache is not None and payload:
            self._cache.set(COACHING_REPORT_KEY, payload)
        return CoachingReport.from_payload(payload)

    def cached_coaching(self) -> CoachingReport | None:
        if self._cache is None:
            return None
        payload = self._cache.get(COACHING_REPORT_KEY)
        if not isinstance(payload, dict):
            return None
        return CoachingReport.from_payload(payload)

    def fetch_detail(self, filename: str) -> dict[str, Any] | None:
        """Blocking detail fetch for the lightbox; failures are logged only."""
        try:
            return self._gateway.fetch_detail(filename)
        except GatewayError as ex:
            logger.warning("Detail fetch failed for {}: {}", filename, ex)
            return None
