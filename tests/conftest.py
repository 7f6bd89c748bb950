"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lms_cache.adapters.disk_store import BoundedDiskStore
from lms_cache.adapters.large_item_store import LargeItemStore
from lms_cache.adapters.memory_tier import MemoryTier
from lms_cache.caching.keys import DEFAULT_KEY_PREFIX
from lms_cache.caching.stats import StatsCollector
from lms_cache.caching.tiered_store import TieredStore
from lms_cache.config.models import CacheSettings

PREFIX = DEFAULT_KEY_PREFIX


class FakeClock:
    """Manually advanced time source (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Deterministic clock shared by a test's components."""
    return FakeClock()


@pytest.fixture
def memory() -> MemoryTier:
    return MemoryTier()


@pytest.fixture
def bounded(tmp_path: Path):
    """Bounded store with a 50 kB quota."""
    store = BoundedDiskStore(tmp_path / "persistent", quota_bytes=50_000)
    yield store
    store.close()


@pytest.fixture
def large(tmp_path: Path) -> LargeItemStore:
    return LargeItemStore(tmp_path / "large")


@pytest.fixture
def store(memory, bounded, large, clock) -> TieredStore:
    """Tiered store: 40 kB budget, 2 kB large-item threshold, 60s TTL."""
    return TieredStore(
        memory,
        bounded,
        large,
        prefix=PREFIX,
        capacity_bytes=40_000,
        large_threshold_bytes=2_000,
        default_ttl_seconds=60.0,
        stats=StatsCollector(),
        clock=clock,
    )


@pytest.fixture
def settings(tmp_path: Path) -> CacheSettings:
    """Settings with both durable tiers inside tmp_path."""
    return CacheSettings.in_directory(
        tmp_path / "cache",
        default_ttl_seconds=60.0,
        large={"threshold_bytes": 2_000},
    )
