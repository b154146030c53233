"""
app/cache package marker.
"""

from app.cache.payload_cache import CacheConfig, CacheInfo, PayloadCache

__all__ = [
    "CacheConfig",
    "CacheInfo",
    "PayloadCache",
]
