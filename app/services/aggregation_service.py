"""
app/services/aggregation_service.py

Statistics aggregation engine for normalized recalls.

Every public function takes a snapshot of CanonicalRecall entities
(usually already narrowed by ``app.services.recall_filter``) and returns
frozen result objects. Nothing is cached or carried between calls: each
call recomputes from scratch, so two calls on the same snapshot return
equal results.

Date handling
-------------
Temporal aggregates use ``recall_date`` (the publication date) on the
Paris calendar (``BUCKET_TZ``), so year and month groups follow the French
day boundary. Trailing windows compare absolute instants. Records whose
date cannot be parsed still count towards totals, rankings and
distributions, but are skipped by the monthly, yearly and trailing-window
figures.

Month groups are keyed by (year, month) and sorted on that key, never on
the display label, which is not chronological across years. Labels use
French short month names ("janv. 2024").

Percentages
-----------
All percentages are on a 0–100 scale rounded to one decimal. An empty
denominator yields ``0.0``.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Final, Sequence

from app.domain.recall import CanonicalRecall, local_recall_date
from risk.base import RISK_TIER_LABELS, RISK_TIERS, RiskTier

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WINDOW_DAYS: Final[int] = 30
"""Length of the trailing window used by the KPI summary."""

DAYS_PER_MONTH: Final[float] = 30.0
"""Month length used to turn the data span into an average-per-month divisor."""

SERIES_MONTHS: Final[int] = 12
"""Number of most recent month groups kept by the monthly series."""

TOP_CATEGORY_LIMIT: Final[int] = 10
TOP_BRAND_LIMIT: Final[int] = 10
BREAKDOWN_CATEGORY_LIMIT: Final[int] = 6
QUICK_STATS_CATEGORY_LIMIT: Final[int] = 4

CATEGORY_LABEL_WIDTH: Final[int] = 25
BRAND_LABEL_WIDTH: Final[int] = 20
ELLIPSIS: Final[str] = "..."

NO_CATEGORY: Final[str] = "N/A"

FOOD_CATEGORY_TERMS: Final[tuple[str, ...]] = (
    "alimentation",
    "boulangerie",
    "charcuterie",
    "produits laitiers",
    "viandes",
    "poissons",
    "fruits et légumes",
    "boissons",
    "épicerie",
)

FOOD_KEY: Final[str] = "food"
NON_FOOD_KEY: Final[str] = "non_food"
FOOD_LABEL: Final[str] = "Alimentaire"
NON_FOOD_LABEL: Final[str] = "Non-alimentaire"

_FR_MONTH_ABBREVIATIONS: Final[tuple[str, ...]] = (
    "janv.",
    "févr.",
    "mars",
    "avr.",
    "mai",
    "juin",
    "juil.",
    "août",
    "sept.",
    "oct.",
    "nov.",
    "déc.",
)


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KPISummary:
    """
    Headline figures for the statistics dashboard.
    """

    total: int
    last_30_days: int
    trend_percentage: float
    """Change of the last 30 days against the 30 days before, in percent."""

    critical_percentage: float
    average_per_month: float
    top_category: str
    top_category_count: int


@dataclass(frozen=True)
class MonthlyCount:
    month: str
    count: int


@dataclass(frozen=True)
class MonthlyRiskCount:
    month: str
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


@dataclass(frozen=True)
class RankingEntry:
    """
    One row of a frequency ranking. ``label`` may be truncated for display.
    """

    label: str
    count: int
    percentage: float | None = None


@dataclass(frozen=True)
class ShareEntry:
    key: str
    label: str
    count: int
    percentage: float


@dataclass(frozen=True)
class YearlyCount:
    year: int
    count: int


@dataclass(frozen=True)
class CriticalRatePoint:
    month: str
    rate: float


@dataclass(frozen=True)
class CategoryRiskBreakdown:
    category: str
    critical: int
    high: int
    medium: int
    low: int


@dataclass(frozen=True)
class CategoryRiskRadar:
    category: str
    critical: int
    high: int
    medium: int


@dataclass(frozen=True)
class StatisticsReport:
    """
    Every aggregate of the dashboard, computed over one snapshot.
    """

    kpis: KPISummary | None
    monthly: list[MonthlyCount] = field(default_factory=list)
    risk_evolution: list[MonthlyRiskCount] = field(default_factory=list)
    top_categories: list[RankingEntry] = field(default_factory=list)
    top_brands: list[RankingEntry] = field(default_factory=list)
    food_split: list[ShareEntry] = field(default_factory=list)
    risk_distribution: list[ShareEntry] = field(default_factory=list)
    yearly: list[YearlyCount] = field(default_factory=list)
    critical_rate: list[CriticalRatePoint] = field(default_factory=list)
    category_risk: list[CategoryRiskBreakdown] = field(default_factory=list)
    category_radar: list[CategoryRiskRadar] = field(default_factory=list)


@dataclass(frozen=True)
class QuickStats:
    """
    Headline counters shown above a page of recent recalls.
    """

    total: int
    risks: list[ShareEntry] = field(default_factory=list)
    top_categories: list[RankingEntry] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100.0, 1)


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(tz=timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _truncate(label: str, width: int) -> str:
    return label[:width] + ELLIPSIS if len(label) > width else label


def _month_label(key: tuple[int, int]) -> str:
    year, month = key
    return f"{_FR_MONTH_ABBREVIATIONS[month - 1]} {year}"


def _dated(recalls: Sequence[CanonicalRecall]) -> list[tuple[CanonicalRecall, datetime]]:
    dated: list[tuple[CanonicalRecall, datetime]] = []
    for recall in recalls:
        parsed = local_recall_date(recall.recall_date)
        if parsed is not None:
            dated.append((recall, parsed))
    return dated


def _recent_month_groups(
    recalls: Sequence[CanonicalRecall],
    months: int = SERIES_MONTHS,
) -> list[tuple[tuple[int, int], list[CanonicalRecall]]]:
    """
    Group by (year, month), sort ascending and keep the *months* most recent groups.
    """

    groups: dict[tuple[int, int], list[CanonicalRecall]] = {}
    for recall, parsed in _dated(recalls):
        groups.setdefault((parsed.year, parsed.month), []).append(recall)
    ordered = sorted(groups.items(), key=lambda item: item[0])
    return ordered[-months:] if months > 0 else []


def _ranked(counter: Counter[str]) -> list[tuple[str, int]]:
    # sorted() is stable and Counter keeps first-seen order, so ties keep encounter order.
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)


def _tier_counts(recalls: Sequence[CanonicalRecall]) -> dict[str, int]:
    counts = {tier: 0 for tier in RISK_TIERS}
    for recall in recalls:
        if recall.risk_level in counts:
            counts[recall.risk_level] += 1
    return counts


def is_food_category(category: str) -> bool:
    lowered = category.lower()
    return any(term in lowered for term in FOOD_CATEGORY_TERMS)


# ---------------------------------------------------------------------------
# KPI summary
# ---------------------------------------------------------------------------


def compute_kpis(
    recalls: Sequence[CanonicalRecall],
    *,
    now: datetime | None = None,
) -> KPISummary | None:
    """
    Compute the dashboard KPI summary, or None for an empty collection.

    ``average_per_month`` divides the total by the span between the oldest
    publication date and *now*, in 30-day months. When that span is not
    positive the total itself is returned; when no date parses it is 0.0.
    """

    total = len(recalls)
    if total == 0:
        return None

    current = _now(now)
    window_start = current - timedelta(days=WINDOW_DAYS)
    previous_start = current - timedelta(days=2 * WINDOW_DAYS)

    dated = _dated(recalls)
    last_30_days = sum(1 for _, parsed in dated if parsed >= window_start)
    previous_30_days = sum(1 for _, parsed in dated if previous_start <= parsed < window_start)

    if previous_30_days > 0:
        trend = round((last_30_days - previous_30_days) / previous_30_days * 100.0, 1)
    else:
        trend = 0.0

    critical_count = sum(1 for recall in recalls if recall.risk_level == RiskTier.CRITICAL)

    if dated:
        oldest = min(parsed for _, parsed in dated)
        span_months = (current - oldest).total_seconds() / (DAYS_PER_MONTH * 86400.0)
        average = total / span_months if span_months > 0 else float(total)
    else:
        average = 0.0

    ranking = _ranked(Counter(recall.category for recall in recalls))
    top_category, top_count = ranking[0] if ranking else (NO_CATEGORY, 0)

    summary = KPISummary(
        total=total,
        last_30_days=last_30_days,
        trend_percentage=trend,
        critical_percentage=_percentage(critical_count, total),
        average_per_month=round(average, 1),
        top_category=top_category,
        top_category_count=top_count,
    )
    logger.debug(
        "compute_kpis total=%d last_30_days=%d previous_30_days=%d critical=%d",
        total, last_30_days, previous_30_days, critical_count,
    )
    return summary


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


def monthly_counts(recalls: Sequence[CanonicalRecall]) -> list[MonthlyCount]:
    """
    Recall count per month for the 12 most recent months with data.
    """

    return [
        MonthlyCount(month=_month_label(key), count=len(group))
        for key, group in _recent_month_groups(recalls)
    ]


def monthly_risk_counts(recalls: Sequence[CanonicalRecall]) -> list[MonthlyRiskCount]:
    """
    Per-tier recall counts for the 12 most recent months with data.
    """

    series: list[MonthlyRiskCount] = []
    for key, group in _recent_month_groups(recalls):
        counts = _tier_counts(group)
        series.append(MonthlyRiskCount(month=_month_label(key), **counts))
    return series


def critical_rate_series(recalls: Sequence[CanonicalRecall]) -> list[CriticalRatePoint]:
    """
    Share of critical recalls per month, for the 12 most recent months with data.
    """

    return [
        CriticalRatePoint(
            month=_month_label(key),
            rate=_percentage(
                sum(1 for recall in group if recall.risk_level == RiskTier.CRITICAL),
                len(group),
            ),
        )
        for key, group in _recent_month_groups(recalls)
    ]


def yearly_counts(recalls: Sequence[CanonicalRecall]) -> list[YearlyCount]:
    counter: Counter[int] = Counter(parsed.year for _, parsed in _dated(recalls))
    return [YearlyCount(year=year, count=counter[year]) for year in sorted(counter)]


# ---------------------------------------------------------------------------
# Rankings and distributions
# ---------------------------------------------------------------------------


def top_categories(
    recalls: Sequence[CanonicalRecall],
    limit: int = TOP_CATEGORY_LIMIT,
) -> list[RankingEntry]:
    """
    Most frequent categories with their share of the whole collection.

    Labels longer than 25 characters are cut and suffixed with "...".
    """

    total = len(recalls)
    ranking = _ranked(Counter(recall.category for recall in recalls))
    return [
        RankingEntry(
            label=_truncate(category, CATEGORY_LABEL_WIDTH),
            count=count,
            percentage=_percentage(count, total),
        )
        for category, count in ranking[: max(0, limit)]
    ]


def top_brands(
    recalls: Sequence[CanonicalRecall],
    limit: int = TOP_BRAND_LIMIT,
) -> list[RankingEntry]:
    ranking = _ranked(Counter(recall.brand for recall in recalls))
    return [
        RankingEntry(label=_truncate(brand, BRAND_LABEL_WIDTH), count=count)
        for brand, count in ranking[: max(0, limit)]
    ]


def food_split(recalls: Sequence[CanonicalRecall]) -> list[ShareEntry]:
    """
    Food versus non-food counts, by category vocabulary match.
    """

    total = len(recalls)
    food = sum(1 for recall in recalls if is_food_category(recall.category))
    non_food = total - food
    return [
        ShareEntry(key=FOOD_KEY, label=FOOD_LABEL, count=food, percentage=_percentage(food, total)),
        ShareEntry(
            key=NON_FOOD_KEY,
            label=NON_FOOD_LABEL,
            count=non_food,
            percentage=_percentage(non_food, total),
        ),
    ]


def risk_distribution(recalls: Sequence[CanonicalRecall]) -> list[ShareEntry]:
    total = len(recalls)
    counts = _tier_counts(recalls)
    return [
        ShareEntry(
            key=tier,
            label=RISK_TIER_LABELS[tier],
            count=counts[tier],
            percentage=_percentage(counts[tier], total),
        )
        for tier in RISK_TIERS
    ]


# ---------------------------------------------------------------------------
# Category x risk
# ---------------------------------------------------------------------------


def _category_members(
    recalls: Sequence[CanonicalRecall],
    label: str,
) -> list[CanonicalRecall]:
    # Truncated ranking labels are matched back by substring on the full category.
    needle = label[: -len(ELLIPSIS)] if label.endswith(ELLIPSIS) else label
    return [recall for recall in recalls if needle in recall.category]


def category_risk_breakdown(
    recalls: Sequence[CanonicalRecall],
    limit: int = BREAKDOWN_CATEGORY_LIMIT,
) -> list[CategoryRiskBreakdown]:
    """
    Per-tier counts for the top categories, for stacked comparison.
    """

    breakdown: list[CategoryRiskBreakdown] = []
    for entry in top_categories(recalls, limit):
        counts = _tier_counts(_category_members(recalls, entry.label))
        breakdown.append(CategoryRiskBreakdown(category=entry.label, **counts))
    return breakdown


def category_risk_radar(
    recalls: Sequence[CanonicalRecall],
    limit: int = BREAKDOWN_CATEGORY_LIMIT,
) -> list[CategoryRiskRadar]:
    return [
        CategoryRiskRadar(
            category=row.category,
            critical=row.critical,
            high=row.high,
            medium=row.medium,
        )
        for row in category_risk_breakdown(recalls, limit)
    ]


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


def build_statistics_report(
    recalls: Sequence[CanonicalRecall],
    *,
    now: datetime | None = None,
) -> StatisticsReport:
    """
    Compute every dashboard aggregate over one snapshot.
    """

    snapshot = tuple(recalls)
    report = StatisticsReport(
        kpis=compute_kpis(snapshot, now=now),
        monthly=monthly_counts(snapshot),
        risk_evolution=monthly_risk_counts(snapshot),
        top_categories=top_categories(snapshot),
        top_brands=top_brands(snapshot),
        food_split=food_split(snapshot),
        risk_distribution=risk_distribution(snapshot),
        yearly=yearly_counts(snapshot),
        critical_rate=critical_rate_series(snapshot),
        category_risk=category_risk_breakdown(snapshot),
        category_radar=category_risk_radar(snapshot),
    )
    logger.debug(
        "build_statistics_report recalls=%d months=%d categories=%d",
        len(snapshot), len(report.monthly), len(report.top_categories),
    )
    return report


def quick_stats(recalls: Sequence[CanonicalRecall]) -> QuickStats:
    """
    Page size, zero-filled tier counts and the four leading categories.
    """

    snapshot = tuple(recalls)
    return QuickStats(
        total=len(snapshot),
        risks=risk_distribution(snapshot),
        top_categories=top_categories(snapshot, limit=QUICK_STATS_CATEGORY_LIMIT),
    )
