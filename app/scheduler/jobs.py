"""
app/scheduler/jobs.py

APScheduler-based periodic recall synchronization.

Schedule
--------
  recall_sync: every ``SYNC_INTERVAL_HOURS`` hours (default 3), first run
  one interval after start.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings, get_scheduler_settings
from app.domain.recall import SyncSummary
from app.services.recall_sync_service import get_recall_sync_service
from db.session import session_scope

logger = logging.getLogger(__name__)

RECALL_SYNC_JOB_ID = "recall_sync"


def run_recall_sync() -> SyncSummary | None:
    """
    Run one recall synchronization. Failures are logged, never raised,
    so the scheduler keeps its next run.
    """
    logger.info("Scheduler: recall_sync starting")
    try:
        with session_scope() as db:
            summary = get_recall_sync_service().sync(db)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Scheduler: recall_sync failed: %s", exc)
        return None

    logger.info(
        "Scheduler: recall_sync complete status=%s fetched=%d upserted=%d failed=%d",
        summary.status,
        summary.records_fetched,
        summary.records_upserted,
        summary.failed_records,
    )
    return summary


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler with the recall sync job registered.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_recall_sync,
        trigger="interval",
        hours=settings.sync_interval_hours,
        id=RECALL_SYNC_JOB_ID,
        name="RappelConso recall sync",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=3600,
    )

    return scheduler
