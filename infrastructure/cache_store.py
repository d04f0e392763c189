"""Local key-value cache persisted as JSON.

Used only as a first-paint optimization: entries are read once at startup
and written after a successful fetch. Each entry carries its write time so
readers can ignore stale values.
"""

from __future__ import annotations

from collections.abc import Callable
import json
from pathlib import Path
import time
from typing import Any

from loguru import logger

GALLERY_SNAPSHOT_KEY = "gallery_snapshot"
COACHING_REPORT_KEY = "coaching_report"
DEFAULT_TTL_S = 300.0


class CacheStore:
    """JSON-file cache with per-entry timestamps."""

    def __init__(
        self,
        path: str | Path,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(path)
        self._ttl_s = float(ttl_s)
        self._clock = clock
        self._data: dict[str, dict[str, Any]] | None = None

    def _load(self) -> dict[str, dict[str, Any]]:
        if self._data is not None:
            return self._data
        self._data = {}
        if not self._path.exists():
            return self._data
        try:
            with self._path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            if isinstance(raw, dict):
                self._data = {k: v for k, v in raw.items() if isinstance(v, dict)}
        except (OSError, ValueError) as ex:
            logger.warning("Cache unreadable, ignoring {}: {}", self._path, ex)
        return self._data

    def get(self, key: str, max_age_s: float | None = None) -> Any | None:
        """Return the cached value, or None when missing or older than the TTL."""
        entry = self._load().get(key)
        if not entry or "value" not in entry:
            return None
        ttl = self._ttl_s if max_age_s is None else float(max_age_s)
        age = self._clock() - float(entry.get("saved_at", 0))
        if ttl > 0 and age > ttl:
            logger.debug("Cache entry {} stale ({:.0f}s old)", key, age)
            return None
        return entry["value"]

    def set(self, key: str, value: Any) -> None:
        """Store `value` and flush to disk; write errors are logged, not raised."""
        data = self._load()
        data[key] = {"saved_at": self._clock(), "value": value}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            tmp.replace(self._path)
        except (OSError, TypeError, ValueError) as ex:
            logger.error("Cache write failed for {}: {}", key, ex)
