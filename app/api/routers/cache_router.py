"""
app/api/routers/cache_router.py

Payload cache inspection and invalidation endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.schemas.cache import CacheInfoResponse, CacheStatusResponse
from app.services.recall_data_service import RecallDataService, get_recall_data_service

router = APIRouter(prefix="/cache", tags=["cache"])


def _status(data_service: RecallDataService) -> CacheStatusResponse:
    info = data_service.cache_info()
    return CacheStatusResponse(
        recent=CacheInfoResponse.model_validate(info["recent"]) if info["recent"] else None,
        historical=CacheInfoResponse.model_validate(info["historical"]) if info["historical"] else None,
    )


@router.get("", response_model=CacheStatusResponse)
def cache_status(
    data_service: RecallDataService = Depends(get_recall_data_service),
) -> CacheStatusResponse:
    return _status(data_service)


@router.delete("", response_model=CacheStatusResponse, status_code=status.HTTP_200_OK)
def clear_cache(
    data_service: RecallDataService = Depends(get_recall_data_service),
) -> CacheStatusResponse:
    """
    Drop the recent and historical caches; the next read reloads from the store.
    """

    data_service.clear_caches()
    return _status(data_service)
