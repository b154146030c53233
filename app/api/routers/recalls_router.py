"""
app/api/routers/recalls_router.py

Recall list, search and detail HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import RISK_LEVEL_PATTERN, PageParams, get_page_params
from app.config import QuerySettings, get_query_settings
from app.schemas.recalls import (
    RecallDetailResponse,
    RecallListResponse,
    RecallSummaryResponse,
    RecentRecallsResponse,
)
from app.schemas.statistics import QuickStatsResponse
from app.services.aggregation_service import quick_stats
from app.services.recall_data_service import RecallDataService, get_recall_data_service
from app.services.recall_filter import RecallFilter, filter_recalls
from db.session import get_db

router = APIRouter(prefix="/recalls", tags=["recalls"])


@router.get("", response_model=RecallListResponse)
def list_recalls(
    category: str | None = Query(default=None, description="Exact category"),
    q: str | None = Query(default=None, description="Text matched against brand, model and reason"),
    risk_level: str | None = Query(default=None, pattern=RISK_LEVEL_PATTERN),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    data_service: RecallDataService = Depends(get_recall_data_service),
    settings: QuerySettings = Depends(get_query_settings),
) -> RecallListResponse:
    """
    Search stored recalls, most recent first.

    Text searches without an explicit ``limit`` return up to the search
    limit. ``risk_level`` narrows the returned page after classification;
    ``total`` counts the store-side matches.
    """

    search_text = q.strip() if q and q.strip() else None
    limit = page.limit
    if search_text and not page.explicit_limit:
        limit = settings.search_limit

    recalls, total = data_service.search(
        db,
        category=category or None,
        search_text=search_text,
        limit=limit,
        offset=page.offset,
    )
    recalls = filter_recalls(recalls, RecallFilter(risk_level=risk_level))
    return RecallListResponse(
        items=[RecallSummaryResponse.model_validate(recall) for recall in recalls],
        total=total,
        limit=limit,
        offset=page.offset,
    )


@router.get("/recent", response_model=RecentRecallsResponse)
def recent_recalls(
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    data_service: RecallDataService = Depends(get_recall_data_service),
    settings: QuerySettings = Depends(get_query_settings),
) -> RecentRecallsResponse:
    resolved = settings.default_page_size if limit is None else min(limit, settings.max_page_size)
    recalls, total = data_service.fetch_recent(db, limit=resolved)
    return RecentRecallsResponse(
        items=[RecallSummaryResponse.model_validate(recall) for recall in recalls],
        total=total,
        limit=resolved,
        offset=0,
        stats=QuickStatsResponse.model_validate(quick_stats(recalls)),
    )


@router.get("/{recall_id}", response_model=RecallDetailResponse)
def get_recall(
    recall_id: str,
    db: Session = Depends(get_db),
    data_service: RecallDataService = Depends(get_recall_data_service),
) -> RecallDetailResponse:
    recall = data_service.get_recall(db, recall_id)
    if recall is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recall '{recall_id}' not found.",
        )
    return RecallDetailResponse.from_recall(recall)
