"""
app/schemas/statistics.py

Response schemas for the statistics dashboard endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class KPISummaryResponse(_FromAttributes):
    total: int
    last_30_days: int
    trend_percentage: float
    critical_percentage: float
    average_per_month: float
    top_category: str
    top_category_count: int


class MonthlyCountResponse(_FromAttributes):
    month: str
    count: int


class MonthlyRiskCountResponse(_FromAttributes):
    month: str
    critical: int
    high: int
    medium: int
    low: int


class RankingEntryResponse(_FromAttributes):
    label: str
    count: int
    percentage: float | None = None


class ShareEntryResponse(_FromAttributes):
    key: str
    label: str
    count: int
    percentage: float


class YearlyCountResponse(_FromAttributes):
    year: int
    count: int


class CriticalRatePointResponse(_FromAttributes):
    month: str
    rate: float


class CategoryRiskBreakdownResponse(_FromAttributes):
    category: str
    critical: int
    high: int
    medium: int
    low: int


class CategoryRiskRadarResponse(_FromAttributes):
    category: str
    critical: int
    high: int
    medium: int


class StatisticsReportResponse(_FromAttributes):
    kpis: KPISummaryResponse | None = None
    monthly: list[MonthlyCountResponse] = Field(default_factory=list)
    risk_evolution: list[MonthlyRiskCountResponse] = Field(default_factory=list)
    top_categories: list[RankingEntryResponse] = Field(default_factory=list)
    top_brands: list[RankingEntryResponse] = Field(default_factory=list)
    food_split: list[ShareEntryResponse] = Field(default_factory=list)
    risk_distribution: list[ShareEntryResponse] = Field(default_factory=list)
    yearly: list[YearlyCountResponse] = Field(default_factory=list)
    critical_rate: list[CriticalRatePointResponse] = Field(default_factory=list)
    category_risk: list[CategoryRiskBreakdownResponse] = Field(default_factory=list)
    category_radar: list[CategoryRiskRadarResponse] = Field(default_factory=list)


class QuickStatsResponse(_FromAttributes):
    total: int = Field(..., ge=0)
    risks: list[ShareEntryResponse] = Field(default_factory=list)
    top_categories: list[RankingEntryResponse] = Field(default_factory=list)


class FilterOptionsResponse(_FromAttributes):
    years: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class AppliedFilterResponse(_FromAttributes):
    year: str | None = None
    category: str | None = None
    risk_level: str | None = None


class StatisticsResponse(BaseModel):
    """
    Dashboard payload: the report over the filtered collection, selector
    options from the unfiltered collection, and both sizes.
    """

    total_recalls: int = Field(..., ge=0)
    filtered_recalls: int = Field(..., ge=0)
    filters: AppliedFilterResponse
    options: FilterOptionsResponse
    report: StatisticsReportResponse
