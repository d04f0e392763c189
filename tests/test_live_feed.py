from PySide6.QtCore import QCoreApplication
import pytest

from core.models import STATUS_PENDING, STATUS_REVIEWED, GalleryPage
from infrastructure.gateway_client import GatewayClient, GatewayTransportError
from infrastructure.live_feed import PollingGalleryFeed, fetch_full_snapshot, snapshot_fingerprint


@pytest.fixture(scope="module")
def qt_app():
    return QCoreApplication.instance() or QCoreApplication([])


class PagedGateway:
    def __init__(self, reviewed):
        self.reviewed = reviewed
        self.calls = []

    def fetch_gallery(self, page=1, page_size=200, tab=None):
        self.calls.append((page, page_size, tab))
        start = (page - 1) * page_size
        chunk = self.reviewed[start : start + page_size]
        return GalleryPage(
            pending=[],
            reviewed=chunk,
            reviewed_total=len(self.reviewed),
            reviewed_has_more=start + page_size < len(self.reviewed),
        )


def test_full_snapshot_concatenates_pages(make_record):
    records = [make_record(f"R{i}.JPG", STATUS_REVIEWED) for i in range(5)]
    gateway = PagedGateway(records)

    result = fetch_full_snapshot(gateway, STATUS_REVIEWED, page_size=2)

    assert [r.filename for r in result] == [r.filename for r in records]
    assert gateway.calls == [(1, 2, "reviewed"), (2, 2, "reviewed"), (3, 2, "reviewed")]


def test_pending_snapshot_is_single_request():
    gateway = PagedGateway([])

    assert fetch_full_snapshot(gateway, STATUS_PENDING) == []
    assert gateway.calls == [(1, 200, "pending")]


def test_unknown_status():
    with pytest.raises(ValueError):
        fetch_full_snapshot(PagedGateway([]), "archived")


def test_fingerprint_tracks_content_and_order(make_record):
    a, b = make_record("A"), make_record("B")

    assert snapshot_fingerprint([a, b]) == snapshot_fingerprint([make_record("A"), b])
    assert snapshot_fingerprint([a, b]) != snapshot_fingerprint([b, a])
    assert snapshot_fingerprint([a]) != snapshot_fingerprint([make_record("A", score=5.0)])


def _active_feed():
    feed = PollingGalleryFeed(PagedGateway([]))
    # Mark active without starting timers or worker threads
    feed._active = True
    snapshots, errors = [], []
    feed.snapshotReceived.connect(lambda status, records: snapshots.append((status, records)))
    feed.feedError.connect(lambda status, message: errors.append((status, message)))
    return feed, snapshots, errors


def test_unchanged_snapshot_is_not_reemitted(qt_app, make_record):
    feed, snapshots, _ = _active_feed()
    records = [make_record("A")]

    feed._on_poll_finished(feed._generation, STATUS_PENDING, records, None)
    feed._on_poll_finished(feed._generation, STATUS_PENDING, [make_record("A")], None)
    feed._on_poll_finished(feed._generation, STATUS_PENDING, [], None)

    assert [len(r) for _, r in snapshots] == [1, 0]


def test_first_empty_snapshot_is_emitted(qt_app):
    feed, snapshots, _ = _active_feed()

    feed._on_poll_finished(feed._generation, STATUS_REVIEWED, [], None)

    assert snapshots == [(STATUS_REVIEWED, [])]


def test_poll_error_keeps_last_snapshot(qt_app, make_record):
    feed, snapshots, errors = _active_feed()
    feed._on_poll_finished(feed._generation, STATUS_PENDING, [make_record("A")], None)

    feed._on_poll_finished(
        feed._generation, STATUS_PENDING, None, str(GatewayTransportError("offline"))
    )

    assert len(snapshots) == 1
    assert errors == [(STATUS_PENDING, "offline")]


def test_results_from_previous_generation_are_dropped(qt_app, make_record):
    feed, snapshots, _ = _active_feed()

    feed._on_poll_finished(feed._generation - 1, STATUS_PENDING, [make_record("A")], None)

    assert snapshots == []


def test_slow_connection_only_before_first_snapshot(qt_app, make_record):
    feed, _, _ = _active_feed()
    slow = []
    feed.slowConnection.connect(lambda: slow.append(True))

    feed._on_first_snapshot_timeout()
    feed._on_poll_finished(feed._generation, STATUS_PENDING, [make_record("A")], None)
    feed._on_first_snapshot_timeout()

    assert slow == [True]


class InlinePool:
    """Runs poll tasks on the calling thread."""

    def start(self, task):
        task.run()


class BrokenGateway:
    def fetch_gallery(self, page=1, page_size=200, tab=None):
        raise RuntimeError("boom")


def test_malformed_payload_reports_error_and_keeps_polling(qt_app, fake_session, response):
    fake_session.responses.extend(
        response(200, {"ok": True, "data": ["unexpected"]}) for _ in range(4)
    )
    client = GatewayClient("https://gw.example.com", "k", session=fake_session)
    feed = PollingGalleryFeed(client)
    feed._pool = InlinePool()
    errors = []
    feed.feedError.connect(lambda status, message: errors.append((status, message)))
    feed._active = True

    feed.refresh()
    assert feed._in_flight == set()
    feed.refresh()

    pending_polls = [c for c in fake_session.calls if c["params"]["tab"] == STATUS_PENDING]
    assert len(pending_polls) == 2
    assert len(errors) == 4
    assert all("Malformed gallery payload" in message for _, message in errors)


def test_unexpected_exception_still_releases_status(qt_app):
    feed = PollingGalleryFeed(BrokenGateway())
    feed._pool = InlinePool()
    errors = []
    feed.feedError.connect(lambda status, message: errors.append((status, message)))
    feed._active = True

    feed.refresh()

    assert feed._in_flight == set()
    assert sorted(s for s, _ in errors) == [STATUS_PENDING, STATUS_REVIEWED]
    assert errors[0][1] == "RuntimeError: boom"
