"""
app/services/recall_sync_service.py

Upstream-to-store synchronization of RappelConso recall sheets.

One run pulls the newest page from the open-data API, upserts it keyed by
``numero_fiche`` and invalidates the read caches. Running it twice over the
same upstream state leaves the store unchanged apart from ``synced_at``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.cache import PayloadCache
from app.config import get_external_http_settings, get_rappel_conso_settings
from app.connectors import BaseConnector, ConnectorRequestError, RappelConsoConnector
from app.domain.recall import SyncSummary
from app.logging_utils import log_event
from app.repositories.recall_repository import RecallRepository
from app.services.recall_data_service import get_recall_data_service

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class RecallSyncError(RuntimeError):
    """
    Raised by ``sync_or_raise`` when a run does not complete.
    """

    def __init__(self, summary: SyncSummary) -> None:
        super().__init__(summary.error or "Recall sync failed.")
        self.summary = summary


class RecallSyncService:
    """
    Coordinates connector fetching, store upserts and cache invalidation.
    """

    def __init__(
        self,
        *,
        connector: BaseConnector,
        repository_factory: Callable[[Session], RecallRepository] = RecallRepository,
        caches: Sequence[PayloadCache] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._connector = connector
        self._repository_factory = repository_factory
        self._caches = tuple(caches)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def sync(self, db: Session, *, limit: int | None = None) -> SyncSummary:
        """
        Run one synchronization. Never raises for upstream or store errors;
        the returned summary carries the status.
        """

        started_at = self._clock()
        source = self._connector.source
        log_event(logger, logging.INFO, "recall_sync_started", source=source)

        try:
            fetched = self._connector.fetch_records(limit=limit, offset=0)
        except ConnectorRequestError as exc:
            return self._failed(source, error=str(exc))
        except Exception as exc:
            logger.exception("Unhandled connector failure source=%s error=%s", source, exc)
            return self._failed(source, error=str(exc))

        upserted = 0
        if fetched.records:
            try:
                upserted = self._repository_factory(db).upsert_records(
                    fetched.records,
                    synced_at=started_at,
                )
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("Failed to persist recall records source=%s error=%s", source, exc)
                return self._failed(
                    source,
                    error=str(exc),
                    records_fetched=len(fetched.records),
                    failed_records=fetched.failed_records + len(fetched.records),
                )

        self._invalidate_caches()

        summary = SyncSummary(
            source=source,
            records_fetched=len(fetched.records),
            records_upserted=upserted,
            failed_records=fetched.failed_records,
            status=STATUS_SUCCESS,
        )
        log_event(
            logger,
            logging.INFO,
            "recall_sync_finished",
            source=source,
            status=summary.status,
            records_fetched=summary.records_fetched,
            records_upserted=summary.records_upserted,
            failed_records=summary.failed_records,
            duration_seconds=round((self._clock() - started_at).total_seconds(), 2),
        )
        return summary

    def sync_or_raise(self, db: Session, *, limit: int | None = None) -> SyncSummary:
        summary = self.sync(db, limit=limit)
        if summary.status != STATUS_SUCCESS:
            raise RecallSyncError(summary)
        return summary

    def _invalidate_caches(self) -> None:
        for cache in self._caches:
            cache.clear()

    def _failed(
        self,
        source: str,
        *,
        error: str,
        records_fetched: int = 0,
        failed_records: int = 1,
    ) -> SyncSummary:
        log_event(logger, logging.ERROR, "recall_sync_failed", source=source, error=error)
        return SyncSummary(
            source=source,
            records_fetched=records_fetched,
            records_upserted=0,
            failed_records=failed_records,
            status=STATUS_FAILED,
            error=error,
        )


@lru_cache(maxsize=1)
def get_recall_sync_service() -> RecallSyncService:
    """
    Build and cache the recall sync service.
    """

    connector = RappelConsoConnector(
        settings=get_rappel_conso_settings(),
        http_settings=get_external_http_settings(),
    )
    return RecallSyncService(
        connector=connector,
        caches=get_recall_data_service().caches,
    )
