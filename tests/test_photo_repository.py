from datetime import datetime, timezone

import pytest

from infrastructure.photo_repository import (
    page_from_payload,
    record_from_payload,
    record_to_payload,
    records_from_payload,
)
from infrastructure.utils import format_display_date, parse_timestamp


def test_record_from_document_fields():
    record = record_from_payload(
        {
            "filename": " DSC00407.JPG ",
            "status": "reviewed",
            "score": "8.2",
            "category": "Paisajes",
            "tags": ["montaña", " cielo ", ""],
            "resumen": "Buena composición",
            "bestOf": "true",
            "uploadedAt": {"_seconds": 1771848000, "_nanoseconds": 0},
            "originalUrl": "https://cdn/o.jpg",
            "thumbUrl": "https://cdn/t.jpg",
            "reviewId": "doc1",
        }
    )

    assert record.filename == "DSC00407.JPG"
    assert record.score == 8.2
    assert record.category == "paisajes"
    assert record.tags == "montaña, cielo"
    assert record.tag_list == ["montaña", "cielo"]
    assert record.summary == "Buena composición"
    assert record.best_of is True
    assert record.uploaded_at == datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)
    assert record.thumbnail_url == "https://cdn/t.jpg"
    assert record.high_res_url == "https://cdn/o.jpg"
    assert record.raw_download_url == ""
    assert record.review_id == "doc1"


def test_status_defaults_to_feed_predicate():
    record = record_from_payload({"filename": "A.JPG"}, "pending")

    assert record.status == "pending"
    assert record.score is None
    assert record.best_of is False


def test_missing_filename_rejected():
    with pytest.raises(ValueError):
        record_from_payload({"score": 5})


def test_malformed_rows_are_skipped():
    rows = [{"filename": "A.JPG"}, {"score": 3}, None, {"filename": "B.JPG"}]

    assert [r.filename for r in records_from_payload(rows, "pending")] == ["A.JPG", "B.JPG"]


def test_cache_payload_round_trip():
    original = record_from_payload(
        {
            "filename": "A.JPG",
            "status": "reviewed",
            "score": 6.1,
            "uploadedAt": "2026-02-22T04:00:00+00:00",
            "bestOf": False,
        }
    )

    assert record_from_payload(record_to_payload(original)) == original


def test_page_defaults():
    page = page_from_payload({"reviewed": [{"filename": "R.JPG"}]})

    assert page.pending == []
    assert page.reviewed[0].status == "reviewed"
    assert page.reviewed_total == 1
    assert page.reviewed_has_more is False


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2026-02-23T12:00:00Z", datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)),
        (1771848000, datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)),
        (1771848000000, datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)),
        ("23/02/2026", datetime(2026, 2, 23, tzinfo=timezone.utc)),
        ({"seconds": 1771848000, "nanos": 0}, datetime(2026, 2, 23, 12, 0, tzinfo=timezone.utc)),
        ("", None),
        ("yesterday", None),
        (True, None),
    ],
)
def test_parse_timestamp_shapes(value, expected):
    assert parse_timestamp(value) == expected


def test_display_date():
    assert format_display_date(datetime(2026, 2, 3, tzinfo=timezone.utc)) == "03/02/2026"
    assert format_display_date(None) == ""
