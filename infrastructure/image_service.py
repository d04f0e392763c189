"""Thumbnail download, decoding, and caching.

Thumbnails come from remote URLs; decoded images are kept in a small
in-memory LRU and persisted as JPEG files in an on-disk cache so a restart
does not re-download the whole gallery.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import hashlib
import os
from pathlib import Path
import threading

from PySide6.QtCore import Qt
from PySide6.QtGui import QImage
from loguru import logger
import requests

from infrastructure.logging import get_app_data_directory

DOWNLOAD_TIMEOUT_S = 20.0


def _compute_cache_key(url: str, size_key: int) -> str:
    """Compute a stable cache key from url and requested side."""
    sig = f"{url}|{int(size_key)}".encode("utf-8", errors="ignore")
    return hashlib.sha1(sig).hexdigest()


def _ensure_dir(p: Path) -> None:
    """Create directory `p` if missing (including parents)."""
    p.mkdir(parents=True, exist_ok=True)


@dataclass
class _MemCacheItem:
    key: str
    image: QImage


class _LRUCache:
    def __init__(self, capacity: int) -> None:
        self._cap = max(1, int(capacity or 1))
        self._data: OrderedDict[str, _MemCacheItem] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> QImage | None:
        """Return cached QImage for key, moving it to the MRU position."""
        with self._lock:
            item = self._data.get(key)
            if not item:
                return None
            self._data.move_to_end(key)
            return item.image

    def put(self, key: str, image: QImage) -> None:
        """Insert or update `key` with `image`, evicting LRU when over capacity."""
        with self._lock:
            self._data[key] = _MemCacheItem(key, image)
            self._data.move_to_end(key)
            while len(self._data) > self._cap:
                self._data.popitem(last=False)

    def __len__(self) -> int:
        return len(self._data)


class ThumbnailService:
    """Remote thumbnail loader with memory/disk cache."""

    def __init__(
        self,
        disk_dir: str | None = None,
        mem_capacity: int = 512,
        session: requests.Session | None = None,
    ) -> None:
        self._disk_path = Path(
            os.path.expandvars(disk_dir)
            if disk_dir
            else os.path.join(get_app_data_directory(), "thumbs")
        )
        _ensure_dir(self._disk_path)
        self._mem_cache = _LRUCache(mem_capacity)
        self._session = session or requests.Session()

    def get_thumbnail(self, url: str, side: int) -> QImage | None:
        """Return a thumbnail for `url` bounded by `side`, or None when unavailable."""
        if not url:
            return None
        key = _compute_cache_key(url, side)
        img = self._mem_cache.get(key)
        if img is not None and not img.isNull():
            return img

        disk_file = self._disk_path / f"{key}.jpg"
        if disk_file.exists():
            img = QImage(str(disk_file))
            if not img.isNull():
                self._mem_cache.put(key, img)
                return img
            try:
                disk_file.unlink()
            except OSError:
                pass

        img = self._download(url)
        if img is None:
            return None
        if side > 0 and max(img.width(), img.height()) > side:
            img = img.scaled(
                side,
                side,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        self._mem_cache.put(key, img)
        if not img.save(str(disk_file), "JPG", 85):
            logger.debug("Thumbnail disk cache write failed: {}", disk_file)
        return img

    def _download(self, url: str) -> QImage | None:
        try:
            response = self._session.get(url, timeout=DOWNLOAD_TIMEOUT_S)
        except requests.exceptions.RequestException as ex:
            logger.warning("Thumbnail download failed {}: {}", url, ex)
            return None
        if not response.ok:
            logger.warning("Thumbnail download {} returned HTTP {}", url, response.status_code)
            return None
        img = QImage.fromData(response.content)
        if img.isNull():
            logger.warning("Thumbnail not decodable: {}", url)
            return None
        return img
