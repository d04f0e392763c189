"""Batch mutation execution service.

Provides a high-level API to run review/discard/delete calls against the
gateway, normalize per-item outcomes into a `BatchResult`, and write an
audit CSV for every batch.
"""

from __future__ import annotations

import csv
from datetime import datetime
import os
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import RemovalKind
from core.services.interfaces import BatchResult
from infrastructure.logging import get_audit_log_directory

# Count key returned by each batch endpoint
_COUNT_KEYS: dict[RemovalKind, str] = {
    RemovalKind.DISCARD: "discarded",
    RemovalKind.DELETE: "deleted",
}


def _as_count(value: Any) -> int | None:
    if isinstance(value, (list, tuple, dict)):
        return len(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_batch_result(kind: RemovalKind, requested: list[str], data: Any) -> BatchResult:
    """Normalize a `{discarded|deleted, errors, details: {ok: []}}` payload.

    The call itself succeeded, so a body of any other shape is read as
    "counts unknown" and never raises.
    """
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Unexpected {} result payload: {!r}", kind.value, data)
        data = {}
    error_count = _as_count(data.get("errors", 0) or 0) or 0
    details = data.get("details") or {}
    ok_raw = details.get("ok") if isinstance(details, dict) else None

    if isinstance(ok_raw, (list, tuple)):
        ok_filenames = [str(f) for f in ok_raw]
        ok_set = set(ok_filenames)
        failed = [f for f in requested if f not in ok_set]
    elif error_count == 0:
        ok_filenames = list(requested)
        failed = []
    else:
        # Count only; the gateway did not say which items failed
        ok_filenames = []
        failed = []

    succeeded = _as_count(data.get(_COUNT_KEYS[kind]))
    return BatchResult(
        kind=kind,
        requested=list(requested),
        succeeded=succeeded if succeeded is not None else len(ok_filenames),
        error_count=error_count,
        ok_filenames=ok_filenames,
        failed_filenames=failed,
    )


class MutationService:
    """Coordinates gateway mutations and audit logging."""

    def __init__(self, gateway: Any, audit_dir: str | None = None) -> None:
        """
        Args:
            gateway: Object exposing `review_photo`, `discard_photos`, `delete_photos`.
            audit_dir: Directory for audit CSVs; defaults to the app audit log dir.
        """
        self._gateway = gateway
        self._audit_dir = audit_dir

    def review(self, filename: str) -> dict[str, Any]:
        """Request analysis of one photo; raises `GatewayError` on failure."""
        logger.info("Review requested: {}", filename)
        result = self._gateway.review_photo(filename)
        logger.info("Review completed: {}", filename)
        return result

    def discard(self, filenames: list[str]) -> BatchResult:
        return self._execute(RemovalKind.DISCARD, filenames)

    def delete(self, filenames: list[str]) -> BatchResult:
        return self._execute(RemovalKind.DELETE, filenames)

    def _execute(self, kind: RemovalKind, filenames: list[str]) -> BatchResult:
        if kind == RemovalKind.DISCARD:
            call = self._gateway.discard_photos
        else:
            call = self._gateway.delete_photos
        logger.info("Batch {} requested for {} item(s)", kind.value, len(filenames))
        data = call(list(filenames))
        result = parse_batch_result(kind, filenames, data)
        logger.info(
            "Batch {} done: {} ok, {} error(s)", kind.value, result.succeeded, result.error_count
        )
        result.log_path = self.write_audit_log(result)
        return result

    def write_audit_log(self, result: BatchResult) -> str | None:
        """Write one CSV row per requested filename; returns the path or None on failure."""
        try:
            base_dir = (
                os.path.expandvars(self._audit_dir)
                if self._audit_dir
                else get_audit_log_directory()
            )
            Path(base_dir).mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = os.path.join(base_dir, f"{result.kind.value}_{ts}.csv")
            ok_set = set(result.ok_filenames)
            failed_set = set(result.failed_filenames)
            with open(log_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["Filename", "Success", "Reason"])
                for name in result.requested:
                    if name in ok_set:
                        writer.writerow([name, 1, ""])
                    elif name in failed_set:
                        writer.writerow([name, 0, "Not confirmed by gateway"])
                    else:
                        writer.writerow([name, "", "Unknown"])
            logger.info(
                "Audit log written: {} ({} ok, {} failed)",
                log_path,
                len(result.ok_filenames),
                len(result.failed_filenames),
            )
            return log_path
        except (OSError, ValueError) as ex:
            logger.error("Write audit log failed: {}", ex)
            return None
