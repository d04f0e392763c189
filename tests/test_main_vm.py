import re

import pytest

from app.viewmodels.main_vm import AnalyzeRun, MainVM
from core.models import STATUS_PENDING, STATUS_REVIEWED, RemovalKind
from core.services.interfaces import LEVEL_ERROR, LEVEL_INFO, LEVEL_WARNING, BatchResult
from core.services.selection_service import FIELD_FILE_NAME
from infrastructure.cache_store import GALLERY_SNAPSHOT_KEY, CacheStore
from infrastructure.gateway_client import GatewayTransportError


@pytest.fixture
def vm(fake_gateway, fake_mutations, pending_records, reviewed_records):
    model = MainVM(fake_gateway, fake_mutations)
    model.on_feed_snapshot(STATUS_PENDING, pending_records)
    model.on_feed_snapshot(STATUS_REVIEWED, reviewed_records)
    return model


def _visible(vm):
    return [v.filename for v in vm.visible_items()]


def test_loading_until_first_snapshot(fake_gateway, fake_mutations, pending_records):
    model = MainVM(fake_gateway, fake_mutations)
    assert model.is_loading

    model.on_feed_snapshot(STATUS_PENDING, pending_records)

    assert not model.is_loading
    model.set_tab(STATUS_REVIEWED)
    assert model.is_loading


def test_slow_connection_notice_ends_loading(fake_gateway, fake_mutations):
    model = MainVM(fake_gateway, fake_mutations)

    notice = model.on_feed_timeout()

    assert notice.level == LEVEL_WARNING
    assert "Slow connection" in notice.message
    assert not model.is_loading


def test_pending_tab_keeps_feed_order_and_ignores_filters(vm):
    vm.set_search("nothing-matches")
    vm.set_sort("best")

    assert _visible(vm) == ["P1.JPG", "P2.JPG", "P3.JPG"]


def test_reviewed_tab_filters_and_sorts(vm):
    vm.set_tab(STATUS_REVIEWED)
    assert _visible(vm) == ["R1.JPG", "R2.JPG", "R3.JPG"]

    vm.set_sort("worst")
    assert _visible(vm) == ["R2.JPG", "R3.JPG", "R1.JPG"]

    vm.set_category("paisajes")
    assert _visible(vm) == ["R3.JPG", "R1.JPG"]

    vm.set_search("NIEVE")
    assert _visible(vm) == ["R1.JPG"]


def test_invalid_filter_values_rejected(vm):
    with pytest.raises(ValueError):
        vm.set_tab("archive")
    with pytest.raises(ValueError):
        vm.set_category("astro")
    with pytest.raises(ValueError):
        vm.set_sort("random")


def test_switching_tab_clears_selection(vm):
    vm.toggle_select("P1.JPG")
    assert vm.selection_count == 1

    vm.set_tab(STATUS_REVIEWED)

    assert vm.selection_count == 0


def test_select_all_skips_busy_records(vm):
    vm.sync.begin_processing(["P2.JPG"])

    assert vm.select_all() == 2
    assert vm.selected_filenames() == ["P1.JPG", "P3.JPG"]

    vm.clear_selection()
    assert vm.selected_filenames() == []


def test_regex_selection_on_visible_records(vm):
    assert vm.apply_regex_selection(FIELD_FILE_NAME, r"P[12]", True) == 2
    assert vm.apply_regex_selection(FIELD_FILE_NAME, r"P1", False) == 1
    assert vm.selected_filenames() == ["P2.JPG"]

    with pytest.raises(re.error):
        vm.apply_regex_selection(FIELD_FILE_NAME, "(", True)


def test_stats_count_both_feeds(vm):
    stats = vm.stats()

    assert stats.pending_count == 3
    assert stats.reviewed_count == 3
    assert stats.best_of_count == 1
    assert stats.average_text == "6.3"


def test_analyze_flow_hides_card_until_feed_moves_it(vm, fake_mutations, make_record):
    vm.toggle_select("P1.JPG")
    vm.toggle_select("P2.JPG")

    run = vm.begin_analyze()

    assert run.filenames == ["P1.JPG", "P2.JPG"]
    assert vm.sync.processing == frozenset({"P1.JPG", "P2.JPG"})
    assert vm.selection_count == 0

    vm.review_photo("P1.JPG")
    assert vm.complete_review(run, "P1.JPG") is None
    assert not vm.sync.is_processing("P1.JPG")
    assert vm.sync.removing_kind("P1.JPG") == RemovalKind.REVIEW

    vm.on_feed_snapshot(
        STATUS_REVIEWED,
        vm.sync.records(STATUS_REVIEWED) + [make_record("P1.JPG", STATUS_REVIEWED)],
    )
    assert vm.sync.removing_kind("P1.JPG") == RemovalKind.REVIEW

    remaining = [r for r in vm.sync.records(STATUS_PENDING) if r.filename != "P1.JPG"]
    assert vm.on_feed_snapshot(STATUS_PENDING, remaining) == ["P1.JPG"]
    assert "P1.JPG" not in _visible(vm)
    vm.set_tab(STATUS_REVIEWED)
    assert "P1.JPG" in _visible(vm)
    assert fake_mutations.reviewed == ["P1.JPG"]


def test_analyze_failure_restores_card(vm, fake_mutations):
    fake_mutations.review_errors["P1.JPG"] = GatewayTransportError("timeout")
    vm.toggle_select("P1.JPG")
    run = vm.begin_analyze()

    with pytest.raises(GatewayTransportError) as exc:
        vm.review_photo("P1.JPG")
    notice = vm.complete_review(run, "P1.JPG", exc.value)

    assert notice.level == LEVEL_ERROR
    assert "P1.JPG" in notice.message
    assert vm.sync.removing_kind("P1.JPG") is None
    assert vm.sync.is_selectable("P1.JPG")
    assert run.is_done

    summary = vm.finish_analyze(run)
    assert summary.message == "0 photo(s) analyzed · 1 error(s)"
    assert summary.level == LEVEL_ERROR


def test_finish_analyze_summaries():
    clean = AnalyzeRun(filenames=["A", "B"], analyzed=["A", "B"])
    mixed = AnalyzeRun(filenames=["A", "B"], analyzed=["A"], failed=["B"])
    vm = MainVM(None, None)

    assert vm.finish_analyze(clean).message == "2 photo(s) analyzed"
    assert vm.finish_analyze(clean).level == LEVEL_INFO
    assert vm.finish_analyze(mixed).level == LEVEL_WARNING
    assert mixed.remaining == []


def test_begin_analyze_without_selection_returns_none(vm):
    assert vm.begin_analyze() is None


def test_partial_discard_reports_warning_and_lingers(vm, make_record):
    for name in ("P1.JPG", "P2.JPG", "P3.JPG"):
        vm.toggle_select(name)

    batch = vm.begin_discard()
    assert batch == ["P1.JPG", "P2.JPG", "P3.JPG"]
    assert vm.selection_count == 0

    result = BatchResult(
        kind=RemovalKind.DISCARD,
        requested=batch,
        succeeded=2,
        error_count=1,
        ok_filenames=["P1.JPG", "P2.JPG"],
        failed_filenames=["P3.JPG"],
    )
    notice = vm.complete_removal(RemovalKind.DISCARD, batch, result)

    assert notice.message == "2 photo(s) discarded · 1 error(s)"
    assert notice.level == LEVEL_WARNING
    assert set(vm.sync.removing) == {"P1.JPG", "P2.JPG", "P3.JPG"}

    vm.on_feed_snapshot(STATUS_PENDING, [make_record("P3.JPG")])

    assert vm.sync.removing == {"P3.JPG": RemovalKind.DISCARD}
    assert _visible(vm) == ["P3.JPG"]


def test_delete_network_failure_rolls_back(vm):
    vm.set_tab(STATUS_REVIEWED)
    vm.toggle_select("R2.JPG")

    batch = vm.begin_delete()
    assert vm.sync.removing_kind("R2.JPG") == RemovalKind.DELETE

    notice = vm.complete_removal(
        RemovalKind.DELETE, batch, error=GatewayTransportError("connection reset")
    )

    assert notice.level == LEVEL_ERROR
    assert notice.message.startswith("Could not complete:")
    assert vm.sync.removing == {}
    assert vm.sync.is_selectable("R2.JPG")


def test_removal_targets_only_matching_status(vm):
    vm.sync.select(["P1.JPG", "R1.JPG"])

    assert vm.removal_candidates(RemovalKind.DISCARD) == ["P1.JPG"]
    assert vm.removal_candidates(RemovalKind.DELETE) == ["R1.JPG"]


def test_begin_discard_without_selection_is_noop(vm):
    assert vm.begin_discard() == []
    assert vm.sync.removing == {}


def test_expire_stale_removing_uses_timeout(fake_gateway, fake_mutations, pending_records):
    now = [0.0]
    model = MainVM(fake_gateway, fake_mutations, removing_timeout_s=60, clock=lambda: now[0])
    model.on_feed_snapshot(STATUS_PENDING, pending_records)
    model.toggle_select("P1.JPG")
    model.begin_discard()

    assert model.expire_stale_removing(now=59) == []
    assert model.expire_stale_removing(now=61) == ["P1.JPG"]


def test_empty_analytics_report(vm):
    report = vm.load_analytics()

    assert report.is_empty


def test_coaching_cached_for_next_start(tmp_path, fake_gateway, fake_mutations):
    fake_gateway.coaching = {"resumen_nivel": "Intermedio", "fortalezas": [{"titulo": "Luz"}]}
    cache = CacheStore(tmp_path / "cache.json")
    model = MainVM(fake_gateway, fake_mutations, cache=cache)
    assert model.cached_coaching() is None

    report = model.load_coaching()

    assert report.level_summary == "Intermedio"
    restored = MainVM(fake_gateway, fake_mutations, cache=CacheStore(tmp_path / "cache.json"))
    assert restored.cached_coaching().strengths[0].title == "Luz"


def test_snapshot_cache_seeds_first_paint(
    tmp_path, fake_gateway, fake_mutations, pending_records, reviewed_records
):
    cache_path = tmp_path / "cache.json"
    model = MainVM(fake_gateway, fake_mutations, cache=CacheStore(cache_path))
    model.on_feed_snapshot(STATUS_PENDING, pending_records)
    assert not cache_path.exists()
    model.on_feed_snapshot(STATUS_REVIEWED, reviewed_records)
    assert cache_path.exists()

    restored = MainVM(fake_gateway, fake_mutations, cache=CacheStore(cache_path))
    assert restored.load_cached_snapshot()

    assert [r.filename for r in restored.sync.records(STATUS_PENDING)] == [
        "P1.JPG",
        "P2.JPG",
        "P3.JPG",
    ]
    assert restored.sync.find("R1.JPG").score == 8.5
    assert restored.sync.find("R1.JPG").uploaded_at == reviewed_records[0].uploaded_at



def test_cached_status_never_rewritten_by_partial_live_feed(
    tmp_path, fake_gateway, fake_mutations, pending_records, reviewed_records
):
    now = [0.0]
    cache_path = tmp_path / "cache.json"
    writer = MainVM(
        fake_gateway, fake_mutations, cache=CacheStore(cache_path, clock=lambda: now[0])
    )
    writer.on_feed_snapshot(STATUS_PENDING, pending_records)
    writer.on_feed_snapshot(STATUS_REVIEWED, reviewed_records)

    now[0] = 250.0
    restored = MainVM(
        fake_gateway, fake_mutations, cache=CacheStore(cache_path, clock=lambda: now[0])
    )
    assert restored.load_cached_snapshot()
    restored.on_feed_snapshot(STATUS_PENDING, pending_records[:1])

    now[0] = 500.0
    assert CacheStore(cache_path, clock=lambda: now[0]).get(GALLERY_SNAPSHOT_KEY) is None

    restored.on_feed_snapshot(STATUS_REVIEWED, reviewed_records)
    cached = CacheStore(cache_path, clock=lambda: now[0]).get(GALLERY_SNAPSHOT_KEY)
    assert [r["filename"] for r in cached[STATUS_PENDING]] == ["P1.JPG"]


def test_fetch_detail_failure_returns_none(vm, fake_gateway):
    fake_gateway.details["R1.JPG"] = {"filename": "R1.JPG", "score": 8.5}

    assert vm.fetch_detail("R1.JPG")["score"] == 8.5
    assert vm.fetch_detail("MISSING.JPG") is None


def test_search_tag_switches_to_reviewed(vm):
    vm.toggle_select("P1.JPG")

    vm.search_tag(" #nieve ")

    assert vm.tab == STATUS_REVIEWED
    assert vm.search == "nieve"
    assert vm.selection_count == 0
    assert _visible(vm) == ["R1.JPG"]
