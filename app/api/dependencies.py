"""
app/api/dependencies.py

Shared FastAPI dependencies for paging and statistics filters.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Query

from app.config import QuerySettings, get_query_settings
from app.services.recall_filter import RecallFilter

YEAR_PATTERN = r"^(all|\d{4})$"
RISK_LEVEL_PATTERN = r"^(all|critical|high|medium|low)$"


@dataclass(frozen=True)
class PageParams:
    limit: int
    offset: int
    explicit_limit: bool = False


def get_page_params(
    limit: int | None = Query(default=None, ge=1, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Rows to skip"),
    settings: QuerySettings = Depends(get_query_settings),
) -> PageParams:
    """
    Resolve paging, defaulting and clamping the page size to the configured limits.
    """

    resolved = settings.default_page_size if limit is None else min(limit, settings.max_page_size)
    return PageParams(limit=resolved, offset=offset, explicit_limit=limit is not None)


def get_statistics_filter(
    year: str | None = Query(default=None, pattern=YEAR_PATTERN, description="Four-digit year or 'all'"),
    category: str | None = Query(default=None, description="Exact category or 'all'"),
    risk_level: str | None = Query(default=None, pattern=RISK_LEVEL_PATTERN, description="Risk tier or 'all'"),
) -> RecallFilter:
    return RecallFilter(year=year, category=category, risk_level=risk_level)
