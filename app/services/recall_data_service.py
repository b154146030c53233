"""
app/services/recall_data_service.py

Read path for recall data: store rows normalized into CanonicalRecall
entities, with the recent page and the historical collection served from
the payload cache while fresh.

Read failures are logged and degrade to an empty result so the API keeps
answering while the store is unavailable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, fields
from functools import lru_cache
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.cache import CacheConfig, CacheInfo, PayloadCache
from app.config import get_cache_settings
from app.domain.recall import CanonicalRecall
from app.mappers.recall_mapper import compact_recall, normalize, normalize_many, restore_recall
from app.repositories.recall_repository import RecallRepository

logger = logging.getLogger(__name__)

RECENT_CACHE_KEY = "rappelconso_cache"
HISTORICAL_CACHE_KEY = "rappelconso_historical_data"

RepositoryFactory = Callable[[Session], RecallRepository]

_RECALL_FIELD_NAMES = frozenset(field.name for field in fields(CanonicalRecall))


def _recall_from_dict(payload: Any) -> CanonicalRecall | None:
    if not isinstance(payload, dict):
        return None
    try:
        return CanonicalRecall(**{k: v for k, v in payload.items() if k in _RECALL_FIELD_NAMES})
    except TypeError:
        return None


class RecallDataService:
    """
    Loads, searches and caches normalized recalls.
    """

    def __init__(
        self,
        *,
        repository_factory: RepositoryFactory = RecallRepository,
        recent_cache: PayloadCache | None = None,
        historical_cache: PayloadCache | None = None,
    ) -> None:
        self._repository_factory = repository_factory
        self._recent_cache = recent_cache
        self._historical_cache = historical_cache

    @property
    def caches(self) -> tuple[PayloadCache, ...]:
        return tuple(cache for cache in (self._recent_cache, self._historical_cache) if cache is not None)

    # ------------------------------------------------------------------
    # Historical collection
    # ------------------------------------------------------------------

    def load_historical(self, db: Session) -> list[CanonicalRecall]:
        """
        Every stored recall, most recent first.

        Served from the compact historical cache when fresh; otherwise
        loaded from the store and cached in compact form.
        """

        if self._historical_cache is not None:
            cached = self._historical_cache.get()
            if isinstance(cached, list):
                recalls = [restore_recall(item) for item in cached if isinstance(item, dict)]
                logger.info("Historical recalls served from cache count=%d", len(recalls))
                return recalls

        try:
            rows = self._repository_factory(db).load_all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load historical recalls error=%s", exc)
            return []

        recalls = normalize_many(rows)
        if self._historical_cache is not None and recalls:
            self._historical_cache.set([compact_recall(recall) for recall in recalls])
        logger.info("Historical recalls loaded from store count=%d", len(recalls))
        return recalls

    # ------------------------------------------------------------------
    # Recent page and search
    # ------------------------------------------------------------------

    def fetch_recent(self, db: Session, *, limit: int) -> tuple[list[CanonicalRecall], int]:
        """
        Newest ``limit`` recalls and the total stored count.
        """

        limit = max(1, limit)
        if self._recent_cache is not None:
            cached = self._recent_cache.get()
            if (
                isinstance(cached, dict)
                and isinstance(cached.get("recalls"), list)
                and isinstance(cached.get("total"), int)
                and cached.get("limit", 0) >= limit
            ):
                restored = [_recall_from_dict(item) for item in cached["recalls"][:limit]]
                recalls = [recall for recall in restored if recall is not None]
                logger.info("Recent recalls served from cache count=%d", len(recalls))
                return recalls, cached["total"]

        try:
            rows, total = self._repository_factory(db).query(limit=limit, offset=0)
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch recent recalls error=%s", exc)
            return [], 0

        recalls = normalize_many(rows)
        if self._recent_cache is not None and recalls:
            self._recent_cache.set(
                {
                    "recalls": [asdict(recall) for recall in recalls],
                    "total": total,
                    "limit": limit,
                }
            )
        return recalls, total

    def search(
        self,
        db: Session,
        *,
        category: str | None = None,
        search_text: str | None = None,
        limit: int,
        offset: int = 0,
    ) -> tuple[list[CanonicalRecall], int]:
        """
        Filtered page straight from the store; never cached.
        """

        try:
            rows, total = self._repository_factory(db).query(
                category=category,
                search_text=search_text,
                limit=limit,
                offset=offset,
            )
        except SQLAlchemyError as exc:
            logger.exception(
                "Recall search failed category=%r search=%r error=%s",
                category,
                search_text,
                exc,
            )
            return [], 0
        return normalize_many(rows), total

    def get_recall(self, db: Session, recall_id: str) -> CanonicalRecall | None:
        """
        One recall by record number, or by upstream numeric id.
        """

        repository = self._repository_factory(db)
        try:
            row = repository.get_by_record_number(recall_id)
            if row is None and recall_id.isdigit():
                row = repository.get_by_upstream_id(int(recall_id))
        except SQLAlchemyError as exc:
            logger.exception("Failed to load recall id=%r error=%s", recall_id, exc)
            return None
        return normalize(row) if row is not None else None

    # ------------------------------------------------------------------
    # Cache administration
    # ------------------------------------------------------------------

    def clear_caches(self) -> None:
        for cache in self.caches:
            cache.clear()
        logger.info("Recall caches cleared count=%d", len(self.caches))

    def cache_info(self) -> dict[str, CacheInfo | None]:
        return {
            "recent": self._recent_cache.info() if self._recent_cache is not None else None,
            "historical": self._historical_cache.info() if self._historical_cache is not None else None,
        }


@lru_cache(maxsize=1)
def get_recall_data_service() -> RecallDataService:
    """
    Build and cache the recall data service.
    """

    settings = get_cache_settings()
    if not settings.enabled:
        return RecallDataService()

    return RecallDataService(
        recent_cache=PayloadCache(
            CacheConfig(key=RECENT_CACHE_KEY, freshness_seconds=settings.recent_ttl_seconds),
            directory=settings.directory,
        ),
        historical_cache=PayloadCache(
            CacheConfig(key=HISTORICAL_CACHE_KEY, freshness_seconds=settings.historical_ttl_seconds),
            directory=settings.directory,
        ),
    )
