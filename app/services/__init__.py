"""
app/services package marker.
"""

from app.services.recall_data_service import RecallDataService, get_recall_data_service
from app.services.recall_sync_service import (
    RecallSyncError,
    RecallSyncService,
    get_recall_sync_service,
)

__all__ = [
    "RecallDataService",
    "get_recall_data_service",
    "RecallSyncError",
    "RecallSyncService",
    "get_recall_sync_service",
]
