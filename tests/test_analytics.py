from core.models import STATUS_REVIEWED
from core.services.analytics import (
    AnalyticsReport,
    CoachingReport,
    GalleryStats,
    compute_analytics,
    format_score,
    score_band,
)


def test_score_bands():
    assert score_band(9.1) == "high"
    assert score_band(7.0) == "high"
    assert score_band(6.9) == "mid"
    assert score_band(5.0) == "mid"
    assert score_band(4.99) == "low"
    assert score_band(None) == "low"
    assert format_score(7) == "7.0"


def test_gallery_stats_without_scores(make_record):
    stats = GalleryStats.from_records([make_record("P.JPG")], [])

    assert stats.pending_count == 1
    assert stats.average_score is None
    assert stats.average_text == "—"


def test_empty_payload_is_empty_state():
    assert AnalyticsReport.from_payload({"total": 0}).is_empty
    assert AnalyticsReport.from_payload(None).is_empty
    assert compute_analytics([]) == {"total": 0}


def test_compute_analytics_aggregates(reviewed_records):
    payload = compute_analytics(reviewed_records)

    assert payload["total"] == 3
    assert payload["avg_score"] == 6.3
    assert payload["median_score"] == 6.5
    assert payload["best_score"] == 8.5
    assert payload["worst_score"] == 4.0
    assert payload["bestOf_count"] == 1
    assert payload["distribution"]["8-9"] == 1
    assert payload["distribution"]["3-5"] == 1
    assert payload["categories"][0] == {"category": "paisajes", "count": 2, "avg": 7.5}
    assert [p["filename"] for p in payload["top5"]] == ["R1.JPG", "R3.JPG", "R2.JPG"]
    assert payload["bottom5"][0]["filename"] == "R2.JPG"
    # Timeline runs oldest first with a moving average
    assert [p["filename"] for p in payload["timeline"]] == ["R3.JPG", "R2.JPG", "R1.JPG"]
    assert payload["timeline"][1]["avg"] == 5.25


def test_report_parses_computed_payload(reviewed_records, make_record):
    records = reviewed_records + [make_record("Z.JPG", STATUS_REVIEWED, score=10.0)]

    report = AnalyticsReport.from_payload(compute_analytics(records))

    assert not report.is_empty
    assert report.total == 4
    bands = {b.label: b.band for b in report.distribution}
    assert bands["9-10"] == "high"
    assert bands["5-7"] == "mid"
    assert bands["0-3"] == "low"
    assert sum(b.count for b in report.distribution) == 4
    assert report.top5[0].filename == "Z.JPG"
    assert ("cielo", 1) in report.top_tags


def test_coaching_report_from_payload():
    report = CoachingReport.from_payload(
        {
            "resumen_nivel": "Intermedio",
            "fortalezas": [{"titulo": "Luz", "detalle": "Buena", "fotos_ejemplo": "A.JPG"}],
            "debilidades": [{"titulo": "Horizonte"}],
            "mision_semanal": {"titulo": "Tercios", "settings_sugeridos": "f/8"},
            "proximo_objetivo": "Subir a 7",
        }
    )

    assert report.level_summary == "Intermedio"
    assert report.pattern_count == 2
    assert report.strengths[0].example_photos == "A.JPG"
    assert report.weekly_mission.suggested_settings == "f/8"
    assert report.next_goal == "Subir a 7"
    assert CoachingReport.from_payload({}).weekly_mission is None
