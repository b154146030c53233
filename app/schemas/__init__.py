"""
app/schemas package marker.
"""

from app.schemas.cache import CacheInfoResponse, CacheStatusResponse
from app.schemas.recalls import (
    RecallDetailResponse,
    RecallListResponse,
    RecallSummaryResponse,
    RecentRecallsResponse,
)
from app.schemas.statistics import (
    FilterOptionsResponse,
    QuickStatsResponse,
    StatisticsReportResponse,
    StatisticsResponse,
)
from app.schemas.sync import SyncSummaryResponse

__all__ = [
    "CacheInfoResponse",
    "CacheStatusResponse",
    "FilterOptionsResponse",
    "QuickStatsResponse",
    "RecallDetailResponse",
    "RecallListResponse",
    "RecallSummaryResponse",
    "RecentRecallsResponse",
    "StatisticsReportResponse",
    "StatisticsResponse",
    "SyncSummaryResponse",
]
