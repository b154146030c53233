"""
app/main.py

FastAPI entry point for the RappelConso insights API.

Startup order: environment validation, logging, then (in the lifespan)
store connectivity and schema checks and the periodic sync scheduler.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routers import cache_router, recalls_router, statistics_router, sync_router
from app.config import get_scheduler_settings
from db.config import load_env_files

logger = logging.getLogger(__name__)

_DATABASE_URL_VARIABLES = ("DATABASE_URL", "SUPABASE_DB_URL", "LOCAL_DATABASE_URL")
_POSTGRES_PREFIXES = ("postgres://", "postgresql://", "postgresql+psycopg://")


def _validate_env() -> None:
    """
    Fail fast on configuration the service cannot run with.

    Every problem is reported in one RuntimeError so the operator can fix
    them in a single restart.
    """

    load_env_files()
    errors: list[str] = []

    configured = next((name for name in _DATABASE_URL_VARIABLES if os.getenv(name, "").strip()), None)
    if configured is None:
        errors.append(
            "No database URL configured. Set one of "
            + ", ".join(_DATABASE_URL_VARIABLES)
            + ". Only PostgreSQL is supported."
        )
    elif not os.environ[configured].strip().startswith(_POSTGRES_PREFIXES):
        errors.append(f"{configured} must be a PostgreSQL URL.")

    interval = os.getenv("SYNC_INTERVAL_HOURS", "").strip()
    if interval and not interval.isdigit():
        errors.append(f"SYNC_INTERVAL_HOURS='{interval}' is not a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_store() -> None:
    """
    Check the store answers and every mapped table exists.

    Does NOT auto-migrate.
    """

    from sqlalchemy import inspect, text

    import db.models  # noqa: F401  registers mapped tables on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(inspect(connection).get_table_names())
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Missing table(s) %s. Run 'alembic upgrade head' and restart.", ", ".join(missing))
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}.")
    logger.info("Recall store reachable, schema validated")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_store()

    settings = get_scheduler_settings()
    if not settings.enabled:
        logger.info("Scheduler disabled by SCHEDULER_ENABLED")
        yield
        return

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler(settings)
    scheduler.start()
    logger.info("Scheduler started, recall sync every %dh", settings.sync_interval_hours)
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="RappelConso Insights API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    for router in (recalls_router, statistics_router, sync_router, cache_router):
        application.include_router(router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
