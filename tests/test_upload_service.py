import pytest

from core.services.interfaces import UploadOutcome, UploadSummary
from infrastructure.gateway_client import GatewayRejectedError
from infrastructure.upload_service import (
    ENTRY_DONE,
    ENTRY_ERROR,
    UploadQueue,
    UploadService,
    classify_file,
    transfer_percent,
)


class UploadGateway:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on or set()
        self.completed = []

    def request_upload_url(self, filename, kind):
        if filename in self.fail_on:
            raise GatewayRejectedError("quota exceeded")
        return {"url": f"https://storage/{kind}/{filename}", "content_type": "image/jpeg"}

    def complete_upload(self, filename, kind):
        self.completed.append((filename, kind))
        return {}


@pytest.fixture
def photo_files(tmp_path):
    jpg = tmp_path / "DSC00500.JPG"
    jpg.write_bytes(b"0123456789")
    raw = tmp_path / "DSC00500.ARW"
    raw.write_bytes(b"raw-bytes")
    return jpg, raw


def test_classify_file():
    assert classify_file("a.jpg") == "jpeg"
    assert classify_file("b.JPEG") == "jpeg"
    assert classify_file("c.ARW") == "raw"
    assert classify_file("d.png") is None


def test_queue_drops_duplicates_and_unsupported(photo_files, tmp_path):
    jpg, raw = photo_files
    queue = UploadQueue()

    added = queue.add_files([str(jpg), str(raw), str(tmp_path / "notes.txt"), str(jpg)])

    assert [e.filename for e in added] == ["DSC00500.JPG", "DSC00500.ARW"]
    assert queue.jpeg_count == 1
    assert queue.raw_count == 1
    queue.remove(0)
    assert [e.filename for e in queue.entries] == ["DSC00500.ARW"]


def test_transfer_percent_band():
    assert transfer_percent(0, 100) == 10
    assert transfer_percent(50, 100) == 50
    assert transfer_percent(100, 100) == 90
    assert transfer_percent(0, 0) == 90


def test_upload_file_reports_progress(photo_files, fake_session):
    jpg, _ = photo_files
    gateway = UploadGateway()
    service = UploadService(gateway, session=fake_session)
    entry = UploadQueue().add_files([str(jpg)])[0]
    seen = []

    outcome = service.upload_file(entry, seen.append)

    assert outcome.ok
    assert entry.status == ENTRY_DONE
    assert seen[0] == 0 and seen[1] == 10 and seen[-2:] == [95, 100]
    assert seen == sorted(seen)
    put = fake_session.puts[0]
    assert put["url"] == "https://storage/jpeg/DSC00500.JPG"
    assert put["body"] == b"0123456789"
    assert put["headers"] == {"Content-Type": "image/jpeg"}
    assert gateway.completed == [("DSC00500.JPG", "jpeg")]


def test_failed_put_skips_completion(photo_files, fake_session):
    jpg, _ = photo_files
    fake_session.put_status = 403
    gateway = UploadGateway()
    entry = UploadQueue().add_files([str(jpg)])[0]

    outcome = UploadService(gateway, session=fake_session).upload_file(entry)

    assert not outcome.ok
    assert "403" in outcome.error
    assert entry.status == ENTRY_ERROR
    assert gateway.completed == []


def test_upload_all_continues_past_failures(photo_files, fake_session):
    jpg, raw = photo_files
    gateway = UploadGateway(fail_on={"DSC00500.JPG"})
    queue = UploadQueue()
    queue.add_files([str(jpg), str(raw)])
    progress = []

    summary = UploadService(gateway, session=fake_session).upload_all(
        queue, lambda i, pct: progress.append((i, pct))
    )

    assert summary.ok_count == 1
    assert summary.error_count == 1
    assert (1, 100) in progress
    notice = summary.to_notice()
    assert notice.message == "1 file(s) uploaded · 1 error(s)"
    assert notice.level == "warning"
    assert [e.filename for e in queue.remaining()] == ["DSC00500.JPG"]


def test_summary_notices():
    assert UploadSummary().to_notice() is None
    failed = UploadSummary([UploadOutcome("a.jpg", ok=False, error="x")]).to_notice()
    assert failed.is_error
    assert UploadSummary([UploadOutcome("a.jpg", ok=True)]).to_notice().level == "info"
