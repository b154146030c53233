"""
db/session.py

Engine and session handling for the recall store.

The engine is built on first use, so importing this module never needs a
configured database.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

logger = logging.getLogger(__name__)


def _pool_options() -> dict[str, Any]:
    """
    Engine keyword arguments from SQL_ECHO and the DB_POOL_* variables.
    """

    def _int(name: str, default: int) -> int:
        try:
            return int(os.getenv(name, default))
        except ValueError:
            return default

    return {
        "echo": os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        "pool_pre_ping": True,
        "pool_recycle": _int("DB_POOL_RECYCLE", 1800),
        "pool_size": _int("DB_POOL_SIZE", 5),
        "max_overflow": _int("DB_MAX_OVERFLOW", 10),
    }


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        # Upserts use INSERT ... ON CONFLICT from the PostgreSQL dialect.
        raise RuntimeError("The recall store requires a PostgreSQL URL.")
    return create_engine(url, **_pool_options())


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    engine = create_db_engine()
    logger.info("Database engine created dialect=%s", engine.dialect.name)
    return engine


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def SessionLocal() -> Session:
    """Open a new session on the shared engine."""
    return _session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for background work; always closed, never committed implicitly."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with session_scope() as session:
        yield session
