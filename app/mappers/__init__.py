"""
app/mappers package marker.
"""

from app.mappers.packed_fields import (
    extract_batch_number,
    extract_first_image,
    split_consumer_actions,
    split_distributors,
    split_image_urls,
)
from app.mappers.recall_mapper import (
    DEFAULT_BRAND,
    DEFAULT_CATEGORY,
    DEFAULT_REASON,
    DEFAULT_TITLE,
    compact_recall,
    normalize,
    normalize_many,
    restore_recall,
)

__all__ = [
    "DEFAULT_BRAND",
    "DEFAULT_CATEGORY",
    "DEFAULT_REASON",
    "DEFAULT_TITLE",
    "compact_recall",
    "extract_batch_number",
    "extract_first_image",
    "normalize",
    "normalize_many",
    "restore_recall",
    "split_consumer_actions",
    "split_distributors",
    "split_image_urls",
]
