"""Upload of local JPEG/RAW files through pre-signed URLs.

Flow per file: ask the gateway for a signed URL, PUT the bytes directly to
storage while reporting progress, then tell the gateway the upload is
complete so ingestion can start. Progress is reported as a percentage:
10 after the signed URL, 10-90 while bytes are sent, 95 before completion,
100 when done.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, BinaryIO

from loguru import logger
import requests

from core.services.interfaces import UploadOutcome, UploadSummary
from infrastructure.gateway_client import GatewayError

KIND_JPEG = "jpeg"
KIND_RAW = "raw"
JPEG_EXTENSIONS = frozenset({".jpg", ".jpeg"})
RAW_EXTENSIONS = frozenset({".arw"})
UPLOAD_CHUNK_BYTES = 256 * 1024
PUT_TIMEOUT_S = 600.0

ENTRY_PENDING = "pending"
ENTRY_UPLOADING = "uploading"
ENTRY_DONE = "done"
ENTRY_ERROR = "error"

ProgressCallback = Callable[[int], None]


def classify_file(name: str) -> str | None:
    """Return "jpeg", "raw" or None for unsupported extensions."""
    ext = Path(name).suffix.lower()
    if ext in JPEG_EXTENSIONS:
        return KIND_JPEG
    if ext in RAW_EXTENSIONS:
        return KIND_RAW
    return None


@dataclass
class UploadEntry:
    """One file queued for upload."""

    path: str
    kind: str
    status: str = ENTRY_PENDING
    progress: int = 0
    error: str | None = None

    @property
    def filename(self) -> str:
        return Path(self.path).name


class UploadQueue:
    """Ordered upload list; duplicates (by file name) and unsupported types are dropped."""

    def __init__(self) -> None:
        self.entries: list[UploadEntry] = []

    def add_files(self, paths: Iterable[str]) -> list[UploadEntry]:
        added: list[UploadEntry] = []
        names = {e.filename for e in self.entries}
        for p in paths:
            kind = classify_file(p)
            if kind is None:
                logger.debug("Skipping unsupported file: {}", p)
                continue
            name = Path(p).name
            if name in names:
                continue
            entry = UploadEntry(path=str(p), kind=kind)
            self.entries.append(entry)
            names.add(name)
            added.append(entry)
        return added

    def remove(self, index: int) -> None:
        if 0 <= index < len(self.entries):
            del self.entries[index]

    def clear(self) -> None:
        self.entries.clear()

    def remaining(self) -> list[UploadEntry]:
        """Entries still to send (pending or previously failed)."""
        return [e for e in self.entries if e.status in (ENTRY_PENDING, ENTRY_ERROR)]

    @property
    def jpeg_count(self) -> int:
        return sum(1 for e in self.entries if e.kind == KIND_JPEG)

    @property
    def raw_count(self) -> int:
        return sum(1 for e in self.entries if e.kind == KIND_RAW)


class _ProgressReader:
    """File wrapper that reports bytes read; `__len__` lets requests set Content-Length."""

    def __init__(self, fh: BinaryIO, total: int, on_bytes: Callable[[int, int], None]) -> None:
        self._fh = fh
        self._total = total
        self._sent = 0
        self._on_bytes = on_bytes

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        chunk = self._fh.read(UPLOAD_CHUNK_BYTES if size is None or size < 0 else size)
        if chunk:
            self._sent += len(chunk)
            self._on_bytes(self._sent, self._total)
        return chunk


def transfer_percent(sent: int, total: int) -> int:
    """Map transferred bytes to the 10-90 band of the overall progress."""
    if total <= 0:
        return 90
    return int(round(sent / total * 80)) + 10


class UploadService:
    """Runs the signed-URL upload flow against the gateway."""

    def __init__(self, gateway: Any, session: requests.Session | None = None) -> None:
        self._gateway = gateway
        self._session = session or getattr(gateway, "session", None) or requests.Session()

    def upload_file(
        self, entry: UploadEntry, progress: ProgressCallback | None = None
    ) -> UploadOutcome:
        """Upload one entry; never raises, failures are returned in the outcome."""
        report = progress or (lambda _pct: None)
        entry.status = ENTRY_UPLOADING
        entry.progress = 0
        entry.error = None
        report(0)
        try:
            signed = self._gateway.request_upload_url(entry.filename, entry.kind)
            self._set(entry, 10, report)

            total = os.path.getsize(entry.path)
            content_type = signed.get("content_type") or (
                "image/jpeg" if entry.kind == KIND_JPEG else "application/octet-stream"
            )
            with open(entry.path, "rb") as fh:
                body = _ProgressReader(
                    fh,
                    total,
                    lambda sent, tot: self._set(entry, transfer_percent(sent, tot), report),
                )
                response = self._session.put(
                    signed["url"],
                    data=body,
                    headers={"Content-Type": content_type},
                    timeout=PUT_TIMEOUT_S,
                )
            if not (200 <= response.status_code < 300):
                raise RuntimeError(f"Upload failed: {response.status_code}")

            self._set(entry, 95, report)
            self._gateway.complete_upload(entry.filename, entry.kind)
            entry.status = ENTRY_DONE
            self._set(entry, 100, report)
            logger.info("Uploaded {} ({} bytes)", entry.filename, total)
            return UploadOutcome(filename=entry.filename, ok=True)
        except (
            GatewayError,
            requests.exceptions.RequestException,
            OSError,
            RuntimeError,
            KeyError,
        ) as ex:
            return self._fail(entry, ex, report)

    def upload_all(
        self,
        queue: UploadQueue,
        progress: Callable[[int, int], None] | None = None,
    ) -> UploadSummary:
        """Upload every remaining entry in order, continuing past failures.

        Args:
            queue: Entries to send; entries already done are skipped.
            progress: Optional callback `(entry_index, percent)`.
        """
        summary = UploadSummary()
        for index, entry in enumerate(queue.entries):
            if entry.status == ENTRY_DONE:
                continue
            cb = (lambda pct, i=index: progress(i, pct)) if progress else None
            summary.outcomes.append(self.upload_file(entry, cb))
        return summary

    @staticmethod
    def _set(entry: UploadEntry, pct: int, report: ProgressCallback) -> None:
        entry.progress = pct
        report(pct)

    @staticmethod
    def _fail(entry: UploadEntry, ex: Exception, report: ProgressCallback) -> UploadOutcome:
        logger.error("Upload error for {}: {}", entry.filename, ex)
        entry.status = ENTRY_ERROR
        entry.error = str(ex)
        entry.progress = 0
        report(0)
        return UploadOutcome(filename=entry.filename, ok=False, error=str(ex))
