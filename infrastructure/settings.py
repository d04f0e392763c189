"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

# Environment variables that take precedence over settings.json
ENV_OVERRIDES: dict[str, str] = {
    "PHOTO_CURATOR_BACKEND_URL": "backend.url",
    "PHOTO_CURATOR_API_KEY": "backend.api_key",
}


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path, environ: dict[str, str] | None = None) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)
        self._overrides: dict[str, str] = {}
        env = os.environ if environ is None else environ
        for var, key in ENV_OVERRIDES.items():
            value = env.get(var)
            if value:
                self._overrides[key] = value

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        if key in self._overrides:
            return self._overrides[key]
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def get_int(self, key: str, default: int) -> int:
        """Return `key` as int, falling back to `default` on missing/invalid values."""
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: float) -> float:
        """Return `key` as float, falling back to `default` on missing/invalid values."""
        try:
            return float(self.get(key, default))
        except (TypeError, ValueError):
            return default

    @property
    def is_demo(self) -> bool:
        """True when no backend URL is configured."""
        return not str(self.get("backend.url", "") or "").strip()
