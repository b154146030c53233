"""
app/api/routers package marker.
"""

from app.api.routers.cache_router import router as cache_router
from app.api.routers.recalls_router import router as recalls_router
from app.api.routers.statistics_router import router as statistics_router
from app.api.routers.sync_router import router as sync_router

__all__ = [
    "cache_router",
    "recalls_router",
    "statistics_router",
    "sync_router",
]
