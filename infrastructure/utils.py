"""Utilities for timestamp parsing and formatting.

This module centralizes the handling of upload timestamps so the rest of the
app can depend on a single behavior. The document store hands out several
shapes (ISO strings, epoch numbers, serialized Firestore timestamps, plain
dates). Parsing is best-effort and will not raise on errors; callers should
expect `None` when data is not available.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from loguru import logger

DISPLAY_DATE_FMT = "%d/%m/%Y"
CACHE_DT_FMT = "%Y-%m-%dT%H:%M:%S%z"

# Epoch values above this are treated as milliseconds
_EPOCH_MS_THRESHOLD = 10**11


def _from_epoch(value: float) -> datetime | None:
    try:
        if abs(value) > _EPOCH_MS_THRESHOLD:
            value = value / 1000.0
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as ex:
        logger.debug("Invalid epoch timestamp {}: {}", value, ex)
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an upload timestamp into an aware datetime (UTC when unspecified).

    Accepted shapes:
    - `datetime` (naive values are assumed UTC)
    - epoch seconds or milliseconds (int/float or digit string)
    - `{"_seconds": ..., "_nanoseconds": ...}` or `{"seconds": ..., "nanos": ...}`
    - ISO-8601 strings (a trailing "Z" is accepted)
    - `d/m/Y` dates
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch(float(value))
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        nanos = value.get("_nanoseconds", value.get("nanos", 0)) or 0
        try:
            return _from_epoch(float(seconds) + float(nanos) / 1e9)
        except (TypeError, ValueError):
            return None

    text = str(value).strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return _from_epoch(float(text))
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    try:
        return datetime.strptime(text, DISPLAY_DATE_FMT).replace(tzinfo=timezone.utc)
    except ValueError:
        logger.debug("Unparseable timestamp: {}", text)
        return None


def format_display_date(dt: datetime | None) -> str:
    """Format a datetime for cards; empty string when None."""
    try:
        return dt.strftime(DISPLAY_DATE_FMT) if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""


def format_cache_datetime(dt: datetime | None) -> str:
    """Format a datetime for the JSON cache; empty string when None."""
    try:
        return dt.isoformat() if dt else ""
    except (ValueError, TypeError, AttributeError):
        return ""
