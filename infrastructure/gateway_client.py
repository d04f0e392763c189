"""HTTP client for the mutation/aggregation gateway.

Every endpoint takes the shared secret as the `key` query parameter and
answers with the envelope `{ok, data?, detail?}`. HTTP 503 is the only
status retried (once, after a fixed delay); everything else surfaces
immediately as a `GatewayError` subclass.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
import requests

from core.models import GalleryPage
from infrastructure.photo_repository import page_from_payload
from infrastructure.retry import retry_transient

SERVICE_UNAVAILABLE = 503
DEFAULT_TIMEOUT_S = 30.0
# Review and coaching wait for the model to answer
SLOW_TIMEOUT_S = 120.0


class GatewayError(Exception):
    """Base class for gateway failures."""


class TransientGatewayError(GatewayError):
    """The gateway reported itself temporarily unavailable."""


class GatewayHTTPError(GatewayError):
    """Non-success HTTP status other than the transient one."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class GatewayRejectedError(GatewayError):
    """Well-formed `ok: false` response; the message is the server's `detail`."""


class GatewayTransportError(GatewayError):
    """Network failure or unreadable response body."""


class GatewayClient:
    """Thin wrapper around `requests.Session` for the gateway endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        retry_delay_s: float = 2.0,
        max_attempts: int = 2,
        session: requests.Session | None = None,
        sleep: Any = None,
    ) -> None:
        """
        Args:
            base_url: Gateway root, e.g. https://example.run.app
            api_key: Shared secret sent as `?key=`.
            timeout_s: Default per-request timeout.
            retry_delay_s: Pause before retrying a 503.
            max_attempts: Total attempts for a 503 (first call included).
            session: Optional preconfigured session.
            sleep: Optional sleep function used between retries.
        """
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_s = float(timeout_s)
        self._retry_delay_s = float(retry_delay_s)
        self._max_attempts = int(max_attempts)
        self.session = session or requests.Session()
        self._sleep = sleep

    # Transport

    def _send(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
        timeout_s: float,
    ) -> Any:
        query: dict[str, Any] = {"key": self._api_key}
        for k, v in (params or {}).items():
            if v is not None:
                query[k] = str(v)
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(
                method, url, params=query, json=body, timeout=timeout_s
            )
        except requests.exceptions.RequestException as ex:
            raise GatewayTransportError(f"{method} {endpoint} failed: {ex}") from ex

        if response.status_code == SERVICE_UNAVAILABLE:
            raise TransientGatewayError(f"HTTP {SERVICE_UNAVAILABLE}")
        if not response.ok:
            raise GatewayHTTPError(response.status_code)
        try:
            payload = response.json()
        except ValueError as ex:
            raise GatewayTransportError(f"{method} {endpoint}: invalid JSON response") from ex
        if not isinstance(payload, dict) or not payload.get("ok"):
            detail = payload.get("detail") if isinstance(payload, dict) else None
            raise GatewayRejectedError(detail or "Server error")
        return payload.get("data")

    def _call(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        timeout_s: float | None = None,
    ) -> Any:
        logger.debug("Gateway {} {}", method, endpoint)
        kwargs: dict[str, Any] = {
            "retry_on": (TransientGatewayError,),
            "max_attempts": self._max_attempts,
            "delay_s": self._retry_delay_s,
            "label": f"{method} {endpoint}",
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return retry_transient(
            lambda: self._send(method, endpoint, params, body, timeout_s or self._timeout_s),
            **kwargs,
        )

    # Reads

    def fetch_gallery(
        self, page: int = 1, page_size: int = 200, tab: str | None = None
    ) -> GalleryPage:
        """GET /api/data for one page, optionally restricted to one tab."""
        data = self._call(
            "GET", "/api/data", params={"page": page, "page_size": page_size, "tab": tab}
        )
        if data is not None and not isinstance(data, dict):
            raise GatewayRejectedError(f"Malformed gallery payload: {type(data).__name__}")
        try:
            return page_from_payload(data)
        except (TypeError, ValueError, AttributeError) as ex:
            raise GatewayRejectedError(f"Malformed gallery payload: {ex}") from ex

    def fetch_detail(self, filename: str) -> dict[str, Any]:
        """GET /api/detail for the lightbox."""
        return self._call("GET", "/api/detail", params={"file": filename}) or {}

    def fetch_analytics(self) -> dict[str, Any]:
        return self._call("GET", "/api/analytics") or {}

    def fetch_coaching(self) -> dict[str, Any]:
        return self._call("GET", "/api/coaching", timeout_s=SLOW_TIMEOUT_S) or {}

    # Mutations

    def review_photo(self, filename: str) -> dict[str, Any]:
        """POST /api/review; returns once scoring has completed."""
        return self._call(
            "POST", "/api/review", body={"filename": filename}, timeout_s=SLOW_TIMEOUT_S
        ) or {}

    def discard_photos(self, filenames: list[str]) -> dict[str, Any]:
        return self._call("POST", "/api/discard", body={"filenames": list(filenames)}) or {}

    def delete_photos(self, filenames: list[str]) -> dict[str, Any]:
        return self._call("POST", "/api/delete", body={"filenames": list(filenames)}) or {}

    # Upload

    def request_upload_url(self, filename: str, kind: str) -> dict[str, Any]:
        """POST /api/upload-url; returns `{url, content_type}`."""
        data = self._call("POST", "/api/upload-url", body={"filename": filename, "type": kind})
        if not isinstance(data, dict) or not data.get("url"):
            raise GatewayRejectedError("Upload URL missing in response")
        return data

    def complete_upload(self, filename: str, kind: str) -> dict[str, Any]:
        return self._call(
            "POST", "/api/upload-complete", body={"filename": filename, "type": kind}
        ) or {}
