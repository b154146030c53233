"""
app/schemas/cache.py

Response schemas for payload cache administration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CacheInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    size_mb: float
    age_minutes: int | None = None


class CacheStatusResponse(BaseModel):
    recent: CacheInfoResponse | None = None
    historical: CacheInfoResponse | None = None
