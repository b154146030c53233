"""
app/api/routers/statistics_router.py

Statistics dashboard HTTP endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.dependencies import get_statistics_filter
from app.schemas.statistics import (
    AppliedFilterResponse,
    FilterOptionsResponse,
    StatisticsReportResponse,
    StatisticsResponse,
)
from app.services.aggregation_service import build_statistics_report
from app.services.recall_data_service import RecallDataService, get_recall_data_service
from app.services.recall_filter import RecallFilter, filter_options, filter_recalls
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["statistics"])


@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(
    criteria: RecallFilter = Depends(get_statistics_filter),
    db: Session = Depends(get_db),
    data_service: RecallDataService = Depends(get_recall_data_service),
) -> StatisticsResponse:
    """
    Aggregate the historical collection under the requested filters.
    """

    recalls = data_service.load_historical(db)
    filtered = filter_recalls(recalls, criteria)
    report = build_statistics_report(filtered)
    logger.info(
        "Statistics computed total=%d filtered=%d year=%r category=%r risk_level=%r",
        len(recalls),
        len(filtered),
        criteria.year,
        criteria.category,
        criteria.risk_level,
    )

    return StatisticsResponse(
        total_recalls=len(recalls),
        filtered_recalls=len(filtered),
        filters=AppliedFilterResponse.model_validate(criteria),
        options=FilterOptionsResponse.model_validate(filter_options(recalls)),
        report=StatisticsReportResponse.model_validate(report),
    )
