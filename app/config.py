"""
app/config.py

Application settings, read from environment variables (and the project
``.env`` files) into frozen dataclasses. Each getter is cached, so a
process sees one consistent configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeVar

from db.config import load_env_files

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_N = TypeVar("_N", int, float)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _raw_env(name: str) -> str | None:
    """
    Stripped value of ``name``; unset and blank both read as None.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def _clamp(value: _N, minimum: _N | None = None, maximum: _N | None = None) -> _N:
    if minimum is not None and value < minimum:
        return minimum
    if maximum is not None and value > maximum:
        return maximum
    return value


def _get_bool_env(name: str, default: bool) -> bool:
    raw = _raw_env(name)
    return default if raw is None else raw.lower() in _TRUTHY


def _get_int_env(name: str, default: int, *, minimum: int | None = None, maximum: int | None = None) -> int:
    raw = _raw_env(name)
    try:
        value = default if raw is None else int(raw)
    except ValueError:
        value = default
    return _clamp(value, minimum, maximum)


def _get_float_env(name: str, default: float, *, minimum: float | None = None) -> float:
    raw = _raw_env(name)
    try:
        value = default if raw is None else float(raw)
    except ValueError:
        value = default
    return _clamp(value, minimum)


def _get_str_env(name: str, default: str) -> str:
    return _raw_env(name) or default


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Timeouts, retry/backoff and client-side rate limit for upstream calls.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class RappelConsoSettings:
    """
    RappelConso dataset on the data.economie.gouv.fr Explore v2.1 API.
    """

    enabled: bool = True
    base_url: str = "https://data.economie.gouv.fr/api/explore/v2.1"
    dataset: str = "rappelconso-v2-gtin-espaces"
    page_size: int = 100
    order_by: str = "date_publication DESC"


@dataclass(frozen=True)
class CacheSettings:
    """
    Local payload cache. Freshness windows are in seconds.
    """

    enabled: bool = True
    directory: str = "data/cache"
    recent_ttl_seconds: int = 30 * 60
    historical_ttl_seconds: int = 7 * 24 * 60 * 60


@dataclass(frozen=True)
class SchedulerSettings:
    enabled: bool = True
    sync_interval_hours: int = 3


@dataclass(frozen=True)
class QuerySettings:
    """
    Page sizes for the recall list and search endpoints.
    """

    default_page_size: int = 50
    max_page_size: int = 200
    search_limit: int = 100


# ---------------------------------------------------------------------------
# Cached getters
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    defaults = ExternalHTTPSettings()
    return ExternalHTTPSettings(
        timeout_seconds=_get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", defaults.timeout_seconds, minimum=1.0),
        max_retries=_get_int_env("EXTERNAL_HTTP_MAX_RETRIES", defaults.max_retries, minimum=0),
        backoff_initial_seconds=_get_float_env(
            "EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", defaults.backoff_initial_seconds, minimum=0.1
        ),
        backoff_multiplier=_get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", defaults.backoff_multiplier, minimum=1.0),
        rate_limit_per_second=_get_float_env(
            "EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", defaults.rate_limit_per_second, minimum=0.1
        ),
    )


@lru_cache(maxsize=1)
def get_rappel_conso_settings() -> RappelConsoSettings:
    defaults = RappelConsoSettings()
    return RappelConsoSettings(
        enabled=_get_bool_env("RAPPEL_CONSO_ENABLED", defaults.enabled),
        base_url=_get_str_env("RAPPEL_CONSO_BASE_URL", defaults.base_url),
        dataset=_get_str_env("RAPPEL_CONSO_DATASET", defaults.dataset),
        # The Explore API serves at most 100 rows per page.
        page_size=_get_int_env("RAPPEL_CONSO_PAGE_SIZE", defaults.page_size, minimum=1, maximum=100),
        order_by=_get_str_env("RAPPEL_CONSO_ORDER_BY", defaults.order_by),
    )


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    defaults = CacheSettings()
    return CacheSettings(
        enabled=_get_bool_env("CACHE_ENABLED", defaults.enabled),
        directory=_get_str_env("CACHE_DIR", defaults.directory),
        recent_ttl_seconds=_get_int_env("CACHE_RECENT_TTL_SECONDS", defaults.recent_ttl_seconds, minimum=0),
        historical_ttl_seconds=_get_int_env(
            "CACHE_HISTORICAL_TTL_SECONDS", defaults.historical_ttl_seconds, minimum=0
        ),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    defaults = SchedulerSettings()
    return SchedulerSettings(
        enabled=_get_bool_env("SCHEDULER_ENABLED", defaults.enabled),
        sync_interval_hours=_get_int_env("SYNC_INTERVAL_HOURS", defaults.sync_interval_hours, minimum=1),
    )


@lru_cache(maxsize=1)
def get_query_settings() -> QuerySettings:
    defaults = QuerySettings()
    max_page_size = _get_int_env("QUERY_MAX_PAGE_SIZE", defaults.max_page_size, minimum=1)
    return QuerySettings(
        default_page_size=_get_int_env(
            "QUERY_DEFAULT_PAGE_SIZE", defaults.default_page_size, minimum=1, maximum=max_page_size
        ),
        max_page_size=max_page_size,
        search_limit=_get_int_env("QUERY_SEARCH_LIMIT", defaults.search_limit, minimum=1, maximum=max_page_size),
    )
