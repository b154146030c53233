"""
tests/test_payload_cache.py

Pytest unit tests for the file-backed payload cache.

Uses ``tmp_path`` and a controllable clock; no wall-clock sleeps.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.cache import CacheConfig, PayloadCache


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(tmp_path: Path, clock: FakeClock) -> PayloadCache:
    return PayloadCache(
        CacheConfig(key="rappelconso_cache", freshness_seconds=30 * 60),
        directory=tmp_path / "cache",
        clock=clock,
    )


class TestReadWrite:
    def test_miss_when_empty(self, cache: PayloadCache) -> None:
        assert cache.get() is None

    def test_hit_returns_payload(self, cache: PayloadCache) -> None:
        payload = {"recalls": [{"id": "1", "brand": "Marque inconnue"}], "total": 1}
        assert cache.set(payload) is True
        assert cache.get() == payload

    def test_entry_layout_on_disk(self, cache: PayloadCache, clock: FakeClock) -> None:
        cache.set([1, 2, 3])
        entry = json.loads(cache.path.read_text(encoding="utf-8"))
        assert entry == {"timestamp": clock.now, "payload": [1, 2, 3]}

    def test_set_overwrites(self, cache: PayloadCache) -> None:
        cache.set("first")
        cache.set("second")
        assert cache.get() == "second"


class TestExpiry:
    def test_fresh_at_boundary(self, cache: PayloadCache, clock: FakeClock) -> None:
        cache.set("payload")
        clock.advance(30 * 60)
        assert cache.get() == "payload"

    def test_expired_entry_is_removed(self, cache: PayloadCache, clock: FakeClock) -> None:
        cache.set("payload")
        clock.advance(30 * 60 + 1)
        assert cache.get() is None
        assert not cache.path.exists()


class TestCorruption:
    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps([1, 2]),
            json.dumps({"payload": "x"}),
            json.dumps({"timestamp": "yesterday", "payload": "x"}),
            json.dumps({"timestamp": 1_700_000_000.0}),
        ],
    )
    def test_corrupt_entry_is_a_miss_and_removed(self, cache: PayloadCache, content: str) -> None:
        cache.path.parent.mkdir(parents=True, exist_ok=True)
        cache.path.write_text(content, encoding="utf-8")
        assert cache.get() is None
        assert not cache.path.exists()

    def test_non_json_values_are_stringified(self, cache: PayloadCache) -> None:
        assert cache.set({"bad": {1, 2}}) is True
        assert isinstance(cache.get()["bad"], str)

    def test_unwritable_directory_reports_failure(self, tmp_path: Path, clock: FakeClock) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        cache = PayloadCache(CacheConfig(key="k", freshness_seconds=60), directory=blocker, clock=clock)
        assert cache.set("payload") is False
        assert cache.get() is None


class TestAdministration:
    def test_clear(self, cache: PayloadCache) -> None:
        cache.set("payload")
        cache.clear()
        assert cache.get() is None
        cache.clear()

    def test_info_absent(self, cache: PayloadCache) -> None:
        assert cache.info() is None

    def test_info_size_and_age(self, cache: PayloadCache, clock: FakeClock) -> None:
        cache.set({"data": "x" * 2048})
        clock.advance(5 * 60 + 59)
        info = cache.info()
        assert info is not None
        assert info.age_minutes == 5
        assert info.size_mb == pytest.approx(0.0, abs=0.01)

    def test_info_does_not_remove_corrupt_entry(self, cache: PayloadCache) -> None:
        cache.path.parent.mkdir(parents=True, exist_ok=True)
        cache.path.write_text("{broken", encoding="utf-8")
        info = cache.info()
        assert info is not None
        assert info.age_minutes is None
        assert cache.path.exists()
