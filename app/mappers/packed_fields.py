"""
app/mappers/packed_fields.py

Parsers for the delimiter-packed micro-formats found in RappelConso rows.

Separators
----------
``$``  identification_produits                 – "<gtin>$<batch>$<date>..." segments
``|``  liens_vers_les_images                    – list of image URLs
``|``  conduites_a_tenir_par_le_consommateur   – list of consumer actions
``¤``  distributeurs                            – list of distributors

None of these functions raises: missing, empty or short input yields
``None`` (single-value extractors) or an empty list (list splitters).
"""

from __future__ import annotations

BATCH_SEPARATOR = "$"
IMAGE_SEPARATOR = "|"
CONSUMER_ACTION_SEPARATOR = "|"
DISTRIBUTOR_SEPARATOR = "¤"


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def extract_batch_number(identification: object) -> str | None:
    """
    Return segment 1 of the ``$``-packed identification field, or None.
    """

    text = _as_text(identification)
    if not text:
        return None
    parts = text.split(BATCH_SEPARATOR)
    if len(parts) >= 2 and parts[1]:
        return parts[1]
    return None


def extract_first_image(images: object) -> str | None:
    """
    Return the first URL of the ``|``-packed image list, or None.
    """

    text = _as_text(images)
    if not text:
        return None
    first = text.split(IMAGE_SEPARATOR)[0]
    return first or None


def _split(value: object, separator: str) -> list[str]:
    text = _as_text(value)
    if not text:
        return []
    return [part.strip() for part in text.split(separator) if part.strip()]


def split_image_urls(images: object) -> list[str]:
    return _split(images, IMAGE_SEPARATOR)


def split_distributors(distributors: object) -> list[str]:
    return _split(distributors, DISTRIBUTOR_SEPARATOR)


def split_consumer_actions(actions: object) -> list[str]:
    return _split(actions, CONSUMER_ACTION_SEPARATOR)
