from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from core.models import STATUS_PENDING, STATUS_REVIEWED, PhotoRecord
from infrastructure.gateway_client import GatewayRejectedError

BASE_TIME = datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)


def _record(filename: str, status: str = STATUS_PENDING, **kwargs: Any) -> PhotoRecord:
    if status == STATUS_REVIEWED:
        kwargs.setdefault("score", 7.0)
        kwargs.setdefault("category", "paisajes")
    return PhotoRecord(filename=filename, status=status, **kwargs)


@pytest.fixture
def make_record():
    return _record


@pytest.fixture
def pending_records():
    return [
        _record(f"P{i}.JPG", uploaded_at=BASE_TIME - timedelta(hours=i)) for i in range(1, 4)
    ]


@pytest.fixture
def reviewed_records():
    return [
        _record("R1.JPG", STATUS_REVIEWED, score=8.5, category="paisajes", tags="cielo, nieve",
                best_of=True, uploaded_at=BASE_TIME - timedelta(days=1)),
        _record("R2.JPG", STATUS_REVIEWED, score=4.0, category="comida", tags="plato",
                uploaded_at=BASE_TIME - timedelta(days=2)),
        _record("R3.JPG", STATUS_REVIEWED, score=6.5, category="paisajes", tags="playa",
                uploaded_at=BASE_TIME - timedelta(days=3)),
    ]


class FakeResponse:
    """Minimal stand-in for `requests.Response`."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._text is not None:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    """Records calls and replays queued responses (or raises queued exceptions)."""

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.puts: list[dict[str, Any]] = []
        self.put_status = 200

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params, "json": json, "timeout": timeout}
        )
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def put(self, url, data=None, headers=None, timeout=None):
        body = b""
        while True:
            chunk = data.read(4)
            if not chunk:
                break
            body += chunk
        self.puts.append({"url": url, "body": body, "headers": headers, "timeout": timeout})
        return FakeResponse(self.put_status)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def response():
    return FakeResponse


class FakeMutations:
    """Scripted `MutationService` replacement for view-model tests."""

    def __init__(self) -> None:
        self.reviewed: list[str] = []
        self.review_errors: dict[str, Exception] = {}

    def review(self, filename: str) -> dict[str, Any]:
        if filename in self.review_errors:
            raise self.review_errors[filename]
        self.reviewed.append(filename)
        return {"filename": filename, "status": STATUS_REVIEWED}


class FakeGateway:
    def __init__(self) -> None:
        self.analytics: dict[str, Any] = {"total": 0}
        self.coaching: dict[str, Any] = {}
        self.details: dict[str, dict[str, Any]] = {}

    def fetch_analytics(self) -> dict[str, Any]:
        return self.analytics

    def fetch_coaching(self) -> dict[str, Any]:
        return self.coaching

    def fetch_detail(self, filename: str) -> dict[str, Any]:
        if filename not in self.details:
            raise GatewayRejectedError(f"Not found: {filename}")
        return self.details[filename]


@pytest.fixture
def fake_mutations():
    return FakeMutations()


@pytest.fixture
def fake_gateway():
    return FakeGateway()
