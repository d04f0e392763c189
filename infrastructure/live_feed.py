"""Live gallery feed backed by periodic polling of the gateway.

Each status (`pending`, `reviewed`) is fetched as a complete list on a fixed
interval. A snapshot is emitted only when its content changed, so the
view-model sees the same "full replacement" stream a push subscription
would deliver.
"""

from __future__ import annotations

import hashlib
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal
from loguru import logger

from core.models import STATUS_PENDING, STATUS_REVIEWED, STATUSES, PhotoRecord
from infrastructure.gateway_client import GatewayError

DEFAULT_POLL_INTERVAL_MS = 5000
DEFAULT_FIRST_SNAPSHOT_TIMEOUT_MS = 8000
DEFAULT_PAGE_SIZE = 200
# Guard against a gateway that keeps reporting has_more
MAX_PAGES = 500


def fetch_full_snapshot(
    gateway: Any, status: str, page_size: int = DEFAULT_PAGE_SIZE
) -> list[PhotoRecord]:
    """Fetch every record currently in `status`, walking reviewed pages."""
    if status == STATUS_PENDING:
        page = gateway.fetch_gallery(page=1, page_size=page_size, tab=STATUS_PENDING)
        return list(page.pending)
    if status != STATUS_REVIEWED:
        raise ValueError(f"Unknown status: {status}")
    records: list[PhotoRecord] = []
    for page in range(1, MAX_PAGES + 1):
        result = gateway.fetch_gallery(page=page, page_size=page_size, tab=STATUS_REVIEWED)
        records.extend(result.reviewed)
        if not result.reviewed_has_more or not result.reviewed:
            break
    else:
        logger.warning("Reviewed feed truncated at {} pages", MAX_PAGES)
    return records


def snapshot_fingerprint(records: list[PhotoRecord]) -> str:
    """Content hash of a snapshot; order-sensitive."""
    h = hashlib.sha1()
    for r in records:
        h.update(repr(r).encode("utf-8", errors="ignore"))
        h.update(b"\x00")
    return h.hexdigest()


class _PollTask(QRunnable):
    """Fetches one status off the UI thread and reports to the feed."""

    def __init__(
        self,
        *,
        feed: PollingGalleryFeed,
        gateway: Any,
        status: str,
        page_size: int,
        generation: int,
    ) -> None:
        super().__init__()
        self._feed = feed
        self._gateway = gateway
        self._status = status
        self._page_size = page_size
        self._generation = generation

    def run(self) -> None:  # type: ignore[override]
        records: list[PhotoRecord] | None = None
        error: str | None = None
        try:
            records = fetch_full_snapshot(self._gateway, self._status, self._page_size)
        except (GatewayError, ValueError) as ex:
            error = str(ex)
        except Exception as ex:
            logger.exception("Unexpected failure polling {}", self._status)
            error = f"{type(ex).__name__}: {ex}"
        self._feed._pollFinished.emit(self._generation, self._status, records, error)


class PollingGalleryFeed(QObject):
    """Emits `snapshotReceived(status, records)` with complete per-status lists.

    Signals:
        snapshotReceived: New content for a status.
        slowConnection: No first snapshot within the configured timeout.
        feedError: `(status, message)` for a failed poll; the last snapshot stays.
    """

    snapshotReceived = Signal(str, object)
    slowConnection = Signal()
    feedError = Signal(str, str)
    _pollFinished = Signal(int, str, object, object)

    def __init__(
        self,
        gateway: Any,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        first_snapshot_timeout_ms: int = DEFAULT_FIRST_SNAPSHOT_TIMEOUT_MS,
        page_size: int = DEFAULT_PAGE_SIZE,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._page_size = int(page_size)
        self._pool = QThreadPool.globalInstance()
        self._active = False
        self._generation = 0
        self._in_flight: set[str] = set()
        self._fingerprints: dict[str, str] = {}
        self._received: set[str] = set()

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(int(poll_interval_ms))
        self._poll_timer.timeout.connect(self.refresh)

        self._first_timer = QTimer(self)
        self._first_timer.setSingleShot(True)
        self._first_timer.setInterval(int(first_snapshot_timeout_ms))
        self._first_timer.timeout.connect(self._on_first_snapshot_timeout)

        self._pollFinished.connect(self._on_poll_finished)

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._generation += 1
        self._in_flight.clear()
        self._first_timer.start()
        self._poll_timer.start()
        logger.info("Gallery feed started")
        self.refresh()

    def stop(self) -> None:
        """Stop polling; results of in-flight polls are dropped."""
        if not self._active:
            return
        self._active = False
        self._generation += 1
        self._poll_timer.stop()
        self._first_timer.stop()
        self._in_flight.clear()
        logger.info("Gallery feed stopped")

    def refresh(self) -> None:
        """Poll every status now (statuses already in flight are skipped)."""
        if not self._active:
            return
        for status in STATUSES:
            if status in self._in_flight:
                continue
            self._in_flight.add(status)
            self._pool.start(
                _PollTask(
                    feed=self,
                    gateway=self._gateway,
                    status=status,
                    page_size=self._page_size,
                    generation=self._generation,
                )
            )

    def _on_poll_finished(self, generation: int, status: str, records: Any, error: Any) -> None:
        if generation != self._generation or not self._active:
            return
        self._in_flight.discard(status)
        if error is not None:
            logger.error("Feed poll failed for {}: {}", status, error)
            self.feedError.emit(status, str(error))
            return
        fingerprint = snapshot_fingerprint(records)
        if status in self._received and self._fingerprints.get(status) == fingerprint:
            return
        self._fingerprints[status] = fingerprint
        self._received.add(status)
        logger.debug("Feed snapshot {}: {} record(s)", status, len(records))
        self.snapshotReceived.emit(status, records)

    def _on_first_snapshot_timeout(self) -> None:
        if self._active and not self._received:
            logger.warning("No gallery snapshot received yet; connection looks slow")
            self.slowConnection.emit()
