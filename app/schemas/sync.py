"""
app/schemas/sync.py

Response schema for recall synchronization runs.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SyncSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    source: str
    records_fetched: int = Field(..., ge=0)
    records_upserted: int = Field(..., ge=0)
    failed_records: int = Field(..., ge=0)
    status: str
    error: str | None = None
