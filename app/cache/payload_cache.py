"""
app/cache/payload_cache.py

Age-bounded JSON payload cache backed by one file per key.

An entry is stored as ``{"timestamp": <epoch seconds>, "payload": ...}``.
Unreadable, malformed or expired entries read as a miss and are removed.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from app.logging_utils import log_event

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class CacheConfig:
    key: str
    freshness_seconds: float


@dataclass(frozen=True)
class CacheInfo:
    """
    Size on disk (MB, 2 decimals) and age in whole minutes of one entry.
    """

    size_mb: float
    age_minutes: int | None


class PayloadCache:
    """
    File cache for one logical payload (e.g. the recent recall page).
    """

    def __init__(
        self,
        config: CacheConfig,
        *,
        directory: str | Path,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._directory = Path(directory)
        self._clock = clock

    @property
    def key(self) -> str:
        return self._config.key

    @property
    def path(self) -> Path:
        return self._directory / f"{self._config.key}.json"

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def get(self) -> Any | None:
        """
        Return the cached payload, or ``None`` on miss, expiry or corruption.
        """

        entry = self._read_entry()
        if entry is None:
            log_event(logger, logging.DEBUG, "cache_miss", key=self.key)
            return None

        age_seconds = self._clock() - entry["timestamp"]
        if age_seconds > self._config.freshness_seconds:
            log_event(
                logger,
                logging.INFO,
                "cache_expired",
                key=self.key,
                age_seconds=round(age_seconds, 1),
            )
            self.clear()
            return None

        log_event(logger, logging.DEBUG, "cache_hit", key=self.key, age_seconds=round(age_seconds, 1))
        return entry["payload"]

    def set(self, payload: Any) -> bool:
        """
        Store ``payload`` stamped with the current clock. Returns False when
        the payload could not be written.
        """

        entry = {"timestamp": self._clock(), "payload": payload}
        try:
            serialized = json.dumps(entry, ensure_ascii=False, default=str)
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{self.key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(serialized)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Cache write failed key=%s error=%s", self.key, exc)
            return False

        log_event(
            logger,
            logging.INFO,
            "cache_set",
            key=self.key,
            size_bytes=len(serialized.encode("utf-8")),
        )
        return True

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Cache clear failed key=%s error=%s", self.key, exc)

    def info(self) -> CacheInfo | None:
        """
        Describe the stored entry, or ``None`` when nothing is stored.
        """

        try:
            size_bytes = self.path.stat().st_size
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cache stat failed key=%s error=%s", self.key, exc)
            return None

        entry = self._read_entry(discard_corrupt=False)
        age_minutes = None
        if entry is not None:
            age_minutes = max(0, math.floor((self._clock() - entry["timestamp"]) / 60))

        return CacheInfo(size_mb=round(size_bytes / _BYTES_PER_MB, 2), age_minutes=age_minutes)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_entry(self, *, discard_corrupt: bool = True) -> dict[str, Any] | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cache read failed key=%s error=%s", self.key, exc)
            return None

        try:
            entry = json.loads(raw)
        except ValueError:
            entry = None

        timestamp = entry.get("timestamp") if isinstance(entry, dict) else None
        valid = (
            isinstance(entry, dict)
            and "payload" in entry
            and isinstance(timestamp, (int, float))
            and not isinstance(timestamp, bool)
        )
        if not valid:
            log_event(logger, logging.WARNING, "cache_corrupt", key=self.key)
            if discard_corrupt:
                self.clear()
            return None
        return entry
