from datetime import datetime, timezone

from app.viewmodels.photo_vm import PhotoVM
from core.models import STATUS_REVIEWED, RemovalKind
from core.services.gallery_sync import PhotoView


def test_pending_card_without_score(make_record):
    vm = PhotoVM(PhotoView(make_record("P.JPG")))

    assert vm.score_text == ""
    assert vm.score_band is None
    assert vm.state_label == ""
    assert vm.is_checkable
    assert vm.tooltip == "P.JPG"


def test_reviewed_card_labels(make_record):
    record = make_record(
        "R.JPG",
        STATUS_REVIEWED,
        score=7.3,
        category="mascotas",
        tags="gato, bokeh",
        summary="Buen bokeh",
        uploaded_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
    )
    vm = PhotoVM(PhotoView(record))

    assert vm.score_text == "7.3"
    assert vm.score_band == "high"
    assert vm.category_label == "Mascotas"
    assert vm.tags == ["gato", "bokeh"]
    assert vm.uploaded_text == "01/02/2026"
    assert vm.tooltip == "R.JPG\nScore: 7.3\nBuen bokeh"


def test_overlay_states_disable_checkbox(make_record):
    record = make_record("P.JPG")

    processing = PhotoVM(PhotoView(record, is_processing=True))
    discarding = PhotoVM(PhotoView(record, removing=RemovalKind.DISCARD))
    analyzed = PhotoVM(PhotoView(record, removing=RemovalKind.REVIEW))

    assert processing.state_label == "Analyzing…"
    assert discarding.state_label == "Discarding…"
    assert analyzed.state_label == "Analyzed"
    assert not processing.is_checkable
    assert not discarding.is_checkable
