"""Aggregate statistics for the dashboard header, analytics tab and coaching tab.

`AnalyticsReport` and `CoachingReport` wrap gateway payloads; keys follow the
gateway's wire names. `compute_analytics` builds the same analytics payload
from local records (demo mode has no server-side aggregation).
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from statistics import median
from typing import Any

from core.models import PhotoRecord

BAND_HIGH = "high"
BAND_MID = "mid"
BAND_LOW = "low"

DISTRIBUTION_BUCKETS: list[tuple[str, float, float]] = [
    ("0-3", 0.0, 3.0),
    ("3-5", 3.0, 5.0),
    ("5-7", 5.0, 7.0),
    ("7-8", 7.0, 8.0),
    ("8-9", 8.0, 9.0),
    ("9-10", 9.0, 10.0),
]
MOVING_AVERAGE_WINDOW = 5
TOP_N = 5
TOP_TAGS_N = 20


def score_band(score: float | None) -> str:
    """Classify a score as high (>= 7), mid (>= 5) or low."""
    s = float(score or 0)
    if s >= 7:
        return BAND_HIGH
    if s >= 5:
        return BAND_MID
    return BAND_LOW


def format_score(score: float | None) -> str:
    return f"{float(score or 0):.1f}"


@dataclass
class GalleryStats:
    """Header counters computed from the current feed snapshots."""

    pending_count: int
    reviewed_count: int
    average_score: float | None
    best_of_count: int

    @classmethod
    def from_records(
        cls, pending: Iterable[PhotoRecord], reviewed: Iterable[PhotoRecord]
    ) -> GalleryStats:
        pending = list(pending)
        reviewed = list(reviewed)
        scores = [r.score for r in reviewed if r.score is not None]
        avg = sum(scores) / len(scores) if scores else None
        return cls(
            pending_count=len(pending),
            reviewed_count=len(reviewed),
            average_score=avg,
            best_of_count=sum(1 for r in reviewed if r.best_of),
        )

    @property
    def average_text(self) -> str:
        return "—" if self.average_score is None else f"{self.average_score:.1f}"


@dataclass
class DistributionBucket:
    label: str
    count: int
    band: str


@dataclass
class CategoryBreakdown:
    category: str
    count: int
    avg: float


@dataclass
class RankedPhoto:
    filename: str
    category: str
    score: float


@dataclass
class TimelinePoint:
    filename: str
    category: str
    score: float
    avg: float


@dataclass
class AnalyticsReport:
    """Parsed `/api/analytics` payload."""

    total: int = 0
    avg_score: float = 0.0
    median_score: float = 0.0
    best_score: float = 0.0
    worst_score: float = 0.0
    best_of_count: int = 0
    best_of_rate: float = 0.0
    distribution: list[DistributionBucket] = field(default_factory=list)
    categories: list[CategoryBreakdown] = field(default_factory=list)
    top5: list[RankedPhoto] = field(default_factory=list)
    bottom5: list[RankedPhoto] = field(default_factory=list)
    top_tags: list[tuple[str, int]] = field(default_factory=list)
    timeline: list[TimelinePoint] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when there is not enough data to chart."""
        return not self.total

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> AnalyticsReport:
        if not payload:
            return cls()
        lower_bounds = {label: lo for label, lo, _ in DISTRIBUTION_BUCKETS}
        distribution = [
            DistributionBucket(
                label=str(label),
                count=int(count or 0),
                band=score_band(lower_bounds.get(str(label), _bucket_lower(str(label)))),
            )
            for label, count in (payload.get("distribution") or {}).items()
        ]
        return cls(
            total=int(payload.get("total") or 0),
            avg_score=float(payload.get("avg_score") or 0),
            median_score=float(payload.get("median_score") or 0),
            best_score=float(payload.get("best_score") or 0),
            worst_score=float(payload.get("worst_score") or 0),
            best_of_count=int(payload.get("bestOf_count") or 0),
            best_of_rate=float(payload.get("bestOf_rate") or 0),
            distribution=distribution,
            categories=[
                CategoryBreakdown(
                    category=str(c.get("category") or "otras"),
                    count=int(c.get("count") or 0),
                    avg=float(c.get("avg") or 0),
                )
                for c in payload.get("categories") or []
            ],
            top5=[_ranked(p) for p in payload.get("top5") or []],
            bottom5=[_ranked(p) for p in payload.get("bottom5") or []],
            top_tags=[
                (str(t.get("tag")), int(t.get("count") or 0)) for t in payload.get("top_tags") or []
            ],
            timeline=[
                TimelinePoint(
                    filename=str(p.get("filename") or ""),
                    category=str(p.get("category") or ""),
                    score=float(p.get("score") or 0),
                    avg=float(p.get("avg") or 0),
                )
                for p in payload.get("timeline") or []
            ],
        )


def _bucket_lower(label: str) -> float:
    try:
        return float(label.split("-", 1)[0])
    except ValueError:
        return 0.0


def _ranked(p: dict[str, Any]) -> RankedPhoto:
    return RankedPhoto(
        filename=str(p.get("filename") or ""),
        category=str(p.get("category") or ""),
        score=float(p.get("score") or 0),
    )


def compute_analytics(records: Iterable[PhotoRecord]) -> dict[str, Any]:
    """Build an analytics payload from reviewed records (oldest first in timeline)."""
    scored = [r for r in records if r.score is not None]
    if not scored:
        return {"total": 0}

    scores = [float(r.score) for r in scored]  # type: ignore[arg-type]
    best_of = sum(1 for r in scored if r.best_of)

    distribution: dict[str, int] = {label: 0 for label, _, _ in DISTRIBUTION_BUCKETS}
    for s in scores:
        for label, lo, hi in DISTRIBUTION_BUCKETS:
            if lo <= s < hi or (hi == 10.0 and s == 10.0):
                distribution[label] += 1
                break

    per_cat: dict[str, list[float]] = defaultdict(list)
    for r in scored:
        per_cat[r.category or "otras"].append(float(r.score))  # type: ignore[arg-type]
    categories = sorted(
        (
            {"category": c, "count": len(v), "avg": round(sum(v) / len(v), 1)}
            for c, v in per_cat.items()
        ),
        key=lambda c: (-c["avg"], c["category"]),
    )

    ranked = sorted(scored, key=lambda r: (-(r.score or 0), r.filename))

    def _row(r: PhotoRecord) -> dict[str, Any]:
        return {"filename": r.filename, "category": r.category or "otras", "score": r.score}

    tags = Counter(t.lower() for r in scored for t in r.tag_list)

    chronological = sorted(
        scored, key=lambda r: (r.uploaded_at is None, r.uploaded_at or 0, r.filename)
    )
    timeline: list[dict[str, Any]] = []
    chrono_scores = [float(r.score) for r in chronological]  # type: ignore[arg-type]
    for i, r in enumerate(chronological):
        window = chrono_scores[max(0, i - MOVING_AVERAGE_WINDOW + 1) : i + 1]
        timeline.append(
            {
                "filename": r.filename,
                "category": r.category or "otras",
                "score": r.score,
                "avg": round(sum(window) / len(window), 2),
            }
        )

    return {
        "total": len(scored),
        "avg_score": round(sum(scores) / len(scores), 1),
        "median_score": round(median(scores), 1),
        "best_score": max(scores),
        "worst_score": min(scores),
        "bestOf_count": best_of,
        "bestOf_rate": round(100.0 * best_of / len(scored), 1),
        "distribution": distribution,
        "categories": categories,
        "top5": [_row(r) for r in ranked[:TOP_N]],
        "bottom5": [_row(r) for r in list(reversed(ranked))[:TOP_N]],
        "top_tags": [{"tag": t, "count": c} for t, c in tags.most_common(TOP_TAGS_N)],
        "timeline": timeline,
    }


@dataclass
class CoachingItem:
    title: str
    detail: str
    example_photos: str = ""


@dataclass
class WeeklyMission:
    title: str
    description: str
    exercise: str = ""
    suggested_settings: str = ""


@dataclass
class CoachingReport:
    """Parsed `/api/coaching` payload."""

    level_summary: str = ""
    strengths: list[CoachingItem] = field(default_factory=list)
    weaknesses: list[CoachingItem] = field(default_factory=list)
    error_pattern: str = ""
    weekly_mission: WeeklyMission | None = None
    sweet_spot: str = ""
    next_goal: str = ""

    @property
    def pattern_count(self) -> int:
        return len(self.strengths) + len(self.weaknesses)

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> CoachingReport:
        if not payload:
            return cls()
        mission = payload.get("mision_semanal")
        return cls(
            level_summary=str(payload.get("resumen_nivel") or ""),
            strengths=[_coaching_item(i) for i in payload.get("fortalezas") or []],
            weaknesses=[_coaching_item(i) for i in payload.get("debilidades") or []],
            error_pattern=str(payload.get("patron_errores") or ""),
            weekly_mission=(
                WeeklyMission(
                    title=str(mission.get("titulo") or ""),
                    description=str(mission.get("descripcion") or ""),
                    exercise=str(mission.get("ejercicio") or ""),
                    suggested_settings=str(mission.get("settings_sugeridos") or ""),
                )
                if isinstance(mission, dict)
                else None
            ),
            sweet_spot=str(payload.get("sweet_spot") or ""),
            next_goal=str(payload.get("proximo_objetivo") or ""),
        )


def _coaching_item(item: dict[str, Any]) -> CoachingItem:
    return CoachingItem(
        title=str(item.get("titulo") or ""),
        detail=str(item.get("detalle") or ""),
        example_photos=str(item.get("fotos_ejemplo") or ""),
    )
