"""
app/services/recall_filter.py

Filter stage applied to normalized recalls before aggregation.

Each predicate is optional; ``None``, ``""`` and ``"all"`` leave a
dimension unconstrained. Active predicates combine with logical AND.
The stage is re-run in full whenever the criteria or the base
collection change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from app.domain.recall import CanonicalRecall, local_recall_date

ALL = "all"


def _is_active(value: str | None) -> bool:
    return value is not None and value.strip() != "" and value.strip().lower() != ALL


def recall_year(recall: CanonicalRecall) -> str | None:
    """
    Paris calendar year of the publication date, or None when unparsable.
    """

    parsed = local_recall_date(recall.recall_date)
    return str(parsed.year) if parsed is not None else None


@dataclass(frozen=True)
class RecallFilter:
    """
    Year / category / risk-tier criteria for the statistics view.
    """

    year: str | None = None
    category: str | None = None
    risk_level: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            _is_active(self.year)
            or _is_active(self.category)
            or _is_active(self.risk_level)
        )

    def matches(self, recall: CanonicalRecall) -> bool:
        if _is_active(self.year) and recall_year(recall) != str(self.year).strip():
            return False
        if _is_active(self.category) and recall.category != self.category:
            return False
        if _is_active(self.risk_level) and recall.risk_level != str(self.risk_level).strip().lower():
            return False
        return True


def filter_recalls(
    recalls: Sequence[CanonicalRecall],
    criteria: RecallFilter | None = None,
) -> list[CanonicalRecall]:
    """
    Return the recalls satisfying every active predicate of *criteria*.
    """

    if criteria is None or criteria.is_empty:
        return list(recalls)
    return [recall for recall in recalls if criteria.matches(recall)]


@dataclass(frozen=True)
class FilterOptions:
    """
    Selector values derived from the unfiltered collection.
    """

    years: list[str]
    categories: list[str]


def filter_options(recalls: Sequence[CanonicalRecall]) -> FilterOptions:
    """
    Distinct years (most recent first) and categories (alphabetical).
    """

    years = {year for year in (recall_year(recall) for recall in recalls) if year is not None}
    categories = {recall.category for recall in recalls}
    return FilterOptions(
        years=sorted(years, key=int, reverse=True),
        categories=sorted(categories),
    )
