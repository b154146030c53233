"""
app/api/routers/sync_router.py

On-demand recall synchronization endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.sync import SyncSummaryResponse
from app.services.recall_sync_service import (
    RecallSyncError,
    RecallSyncService,
    get_recall_sync_service,
)
from db.session import get_db

router = APIRouter(tags=["sync"])


@router.post("/sync", response_model=SyncSummaryResponse)
def run_sync(
    db: Session = Depends(get_db),
    sync_service: RecallSyncService = Depends(get_recall_sync_service),
) -> SyncSummaryResponse:
    """
    Pull the newest recall page from the open-data API into the store.
    """

    try:
        summary = sync_service.sync_or_raise(db)
    except RecallSyncError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SyncSummaryResponse.model_validate(exc.summary).model_dump(),
        ) from exc

    return SyncSummaryResponse.model_validate(summary)
