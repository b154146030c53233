"""
app/domain package marker.
"""

from app.domain.recall import (
    BUCKET_TZ,
    RAW_RECALL_FIELDS,
    CanonicalRecall,
    RawRecallRecord,
    SyncSummary,
    local_recall_date,
    parse_recall_date,
)

__all__ = [
    "BUCKET_TZ",
    "CanonicalRecall",
    "RAW_RECALL_FIELDS",
    "RawRecallRecord",
    "SyncSummary",
    "local_recall_date",
    "parse_recall_date",
]
