"""
app/connectors/base.py

Shared HTTP mechanics for upstream open-data connectors: one pooled
requests session, a minimum interval between calls, and retry with
exponential backoff on throttling, server errors, timeouts and dropped
connections.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.domain.recall import RawRecallRecord

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ConnectorRequestError(RuntimeError):
    """
    Raised when an upstream call fails for good (non-retryable status,
    exhausted retries or an unreadable body).
    """


class _RetryableResponse(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"retryable HTTP status {status_code}")
        self.status_code = status_code


@dataclass(frozen=True)
class ConnectorFetchResult:
    """
    One page pulled from an upstream source.

    ``records`` are raw rows keyed by upstream field names.
    """

    source: str
    records: list[RawRecallRecord] = field(default_factory=list)
    failed_records: int = 0


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int
    initial_delay_seconds: float
    multiplier: float

    @classmethod
    def from_settings(cls, settings: ExternalHTTPSettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            initial_delay_seconds=settings.backoff_initial_seconds,
            multiplier=settings.backoff_multiplier,
        )

    def delay(self, attempt: int) -> float:
        """Wait before retry number ``attempt + 1`` (attempt is 0-based)."""
        return self.initial_delay_seconds * (self.multiplier**attempt)


class BaseConnector(ABC):
    """
    Base for connectors that page raw records out of an HTTP JSON API.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._retry = RetryPolicy.from_settings(http_settings)
        rate = http_settings.rate_limit_per_second
        self._min_interval_seconds = 1.0 / rate if rate > 0 else 0.0
        self._last_call_at: float | None = None

    @abstractmethod
    def fetch_records(self, *, limit: int | None = None, offset: int = 0) -> ConnectorFetchResult:
        """
        Fetch one page of raw upstream records.
        """

    def _get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        response = self._send_with_retry("GET", url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.source}: response body is not JSON.") from exc

    def _send_with_retry(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        last_error: Exception | None = None
        for attempt in range(self._retry.max_retries + 1):
            try:
                return self._send_once(method, url, params=params)
            except (_RetryableResponse, requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt == self._retry.max_retries:
                break
            wait = self._retry.delay(attempt)
            logger.warning(
                "Upstream retry source=%s attempt=%d/%d wait_seconds=%.2f reason=%s",
                self.source,
                attempt + 1,
                self._retry.max_retries,
                wait,
                last_error,
            )
            time.sleep(wait)

        logger.error("Upstream gave up source=%s url=%s error=%s", self.source, url, last_error)
        raise ConnectorRequestError(f"{self.source}: request failed after retries.") from last_error

    def _send_once(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        self._throttle()
        response = self._session.request(
            method=method,
            url=url,
            params=params,
            timeout=self._timeout_seconds,
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise _RetryableResponse(response.status_code)
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error(
                "Upstream rejected request source=%s status=%s url=%s",
                self.source,
                response.status_code,
                url,
            )
            raise ConnectorRequestError(
                f"{self.source}: upstream rejected the request (status={response.status_code})."
            ) from exc
        return response

    def _throttle(self) -> None:
        if self._min_interval_seconds <= 0:
            return
        if self._last_call_at is not None:
            remaining = self._min_interval_seconds - (time.monotonic() - self._last_call_at)
            if remaining > 0:
                time.sleep(remaining)
        self._last_call_at = time.monotonic()
