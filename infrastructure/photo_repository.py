"""Payload mapping for photo records.

Converts document-store/gateway dictionaries into `PhotoRecord` and back
(for the local snapshot cache). Unknown keys are ignored; malformed rows are
logged and skipped rather than failing a whole snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from loguru import logger

from core.models import CATEGORIES, GalleryPage, PhotoRecord
from infrastructure.utils import format_cache_datetime, parse_timestamp


def _parse_score(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid score: {}", value)
        return None


def _parse_bool(value: Any) -> bool:
    """Parse booleans that may arrive as strings or 1/0."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "si", "sí"}
    return bool(value)


def _parse_category(value: Any) -> str | None:
    if not value:
        return None
    text = str(value).strip().lower()
    if text not in CATEGORIES:
        logger.debug("Category outside the known set: {}", text)
    return text


def _parse_tags(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(t).strip() for t in value if str(t).strip())
    return str(value or "")


def record_from_payload(data: dict[str, Any], status: str | None = None) -> PhotoRecord:
    """Build a `PhotoRecord` from a feed/gateway dictionary.

    Args:
        data: Raw document fields; `filename` is required.
        status: Status to force (the feed query predicate) when the payload
            omits it.
    """
    filename = str(data.get("filename") or "").strip()
    if not filename:
        raise ValueError("Photo payload without filename")
    review_id = data.get("reviewId") or data.get("review_id")
    return PhotoRecord(
        filename=filename,
        status=str(data.get("status") or status or ""),
        score=_parse_score(data.get("score")),
        category=_parse_category(data.get("category")),
        tags=_parse_tags(data.get("tags")),
        summary=str(data.get("resumen") or data.get("summary") or ""),
        best_of=_parse_bool(data.get("bestOf", data.get("best_of", False))),
        uploaded_at=parse_timestamp(data.get("uploadedAt") or data.get("fecha")),
        original_url=str(data.get("originalUrl") or ""),
        raw_url=str(data.get("rawUrl") or ""),
        thumb_url=str(data.get("thumbUrl") or ""),
        review_id=str(review_id) if review_id else None,
    )


def records_from_payload(
    rows: Iterable[dict[str, Any]], status: str | None = None
) -> Iterator[PhotoRecord]:
    """Yield records from `rows`, skipping malformed ones."""
    for row in rows or []:
        try:
            yield record_from_payload(row, status)
        except (ValueError, TypeError, AttributeError) as ex:
            logger.error("Photo row error: {} | row={}", ex, row)
            continue


def record_to_payload(record: PhotoRecord) -> dict[str, Any]:
    """Serialize `record` with the document-store field names."""
    return {
        "filename": record.filename,
        "status": record.status,
        "score": record.score,
        "category": record.category,
        "tags": record.tags,
        "resumen": record.summary,
        "bestOf": record.best_of,
        "uploadedAt": format_cache_datetime(record.uploaded_at),
        "originalUrl": record.original_url,
        "rawUrl": record.raw_url,
        "thumbUrl": record.thumb_url,
        "reviewId": record.review_id,
    }


def page_from_payload(data: dict[str, Any] | None) -> GalleryPage:
    """Parse the `data` member of `/api/data`."""
    data = data or {}
    reviewed = list(records_from_payload(data.get("reviewed") or [], "reviewed"))
    return GalleryPage(
        pending=list(records_from_payload(data.get("pending") or [], "pending")),
        reviewed=reviewed,
        reviewed_total=int(data.get("reviewedTotal") or len(reviewed)),
        reviewed_has_more=bool(data.get("reviewedHasMore", False)),
    )
