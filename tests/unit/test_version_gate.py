"""
Unit Tests for VersionGate.

Test Aspects Covered:
    ✅ Business Logic: First run, unchanged version, version bump
    ✅ Edge Cases: Runs once, entries written with plain keys
    ✅ Error Handling: Unavailable bounded tier
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from lms_cache.adapters.disk_store import BoundedDiskStore
from lms_cache.caching.keys import DEFAULT_KEY_PREFIX as PREFIX
from lms_cache.caching.stats import StatsCollector
from lms_cache.domain.entities import CacheEntry
from lms_cache.observability.version_gate import VERSION_RECORD_KEY, VersionGate


def _seed(memory, bounded, name: str) -> str:
    key = f"{PREFIX}{name}"
    entry = CacheEntry.create(key, name, ttl=60.0, now=0.0)
    memory.put(entry)
    bounded.put_raw(key, entry.serialize())
    return key


@pytest.fixture
def resets() -> List[int]:
    return []


@pytest.fixture
def stats() -> StatsCollector:
    return StatsCollector()


def make_gate(memory, bounded, large, version, stats, resets) -> VersionGate:
    return VersionGate(
        memory,
        bounded,
        large,
        prefix=PREFIX,
        current_version=version,
        stats=stats,
        on_reset=resets.append,
    )


class TestVersionGate:
    """Tests for startup invalidation."""

    def test_first_run_writes_version(self, memory, bounded, large, stats, resets) -> None:
        """
        SCENARIO: No version has ever been persisted
        EXPECTED: Treated as a mismatch; the version is recorded
        """
        gate = make_gate(memory, bounded, large, "1", stats, resets)

        assert gate.run() is True
        assert gate.read_persisted_version() == "1"
        assert resets == [0]

    def test_same_version_keeps_entries(self, memory, bounded, large, stats, resets) -> None:
        bounded.put_raw(VERSION_RECORD_KEY, "1")
        key = _seed(memory, bounded, "a")
        gate = make_gate(memory, bounded, large, "1", stats, resets)

        assert gate.run() is False
        assert bounded.get_raw(key).value is not None
        assert key in memory
        assert stats.clears == 0
        assert resets == []

    def test_version_bump_wipes_tiers(self, memory, bounded, large, stats, resets) -> None:
        """
        SCENARIO: Persisted version "1", build version "2"
        EXPECTED: Memory and bounded entries wiped, version updated
        """
        bounded.put_raw(VERSION_RECORD_KEY, "1")
        _seed(memory, bounded, "a")
        _seed(memory, bounded, "b")
        gate = make_gate(memory, bounded, large, "2", stats, resets)

        assert gate.run() is True

        assert len(memory) == 0
        assert bounded.count(PREFIX) == 0
        assert gate.read_persisted_version() == "2"
        assert stats.clears == 1
        assert resets == [2]

    @pytest.mark.asyncio
    async def test_version_bump_schedules_large_clear(
        self, memory, bounded, large, stats, resets
    ) -> None:
        await large.put_raw(f"{PREFIX}big", "payload")
        await large.put_raw("__other__", "kept")
        bounded.put_raw(VERSION_RECORD_KEY, "1")

        make_gate(memory, bounded, large, "2", stats, resets).run()

        assert await large.count(PREFIX) == 0
        assert (await large.get_raw("__other__")).value == "kept"

    def test_runs_once(self, memory, bounded, large, stats, resets) -> None:
        gate = make_gate(memory, bounded, large, "2", stats, resets)
        assert gate.run() is True

        _seed(memory, bounded, "a")
        bounded.put_raw(VERSION_RECORD_KEY, "old")

        assert gate.run() is False
        assert gate.checked
        assert bounded.count(PREFIX) == 1

    def test_wipes_entries_written_with_plain_keys(
        self, store, memory, bounded, large, stats, resets
    ) -> None:
        """
        SCENARIO: set('user_42', ...) under version "1", gate runs with "2"
        EXPECTED: The entry is unreadable afterwards
        """
        bounded.put_raw(VERSION_RECORD_KEY, "1")
        store.set("user_42", {"name": "Ann"})

        make_gate(memory, bounded, large, "2", stats, resets).run()

        assert store.get("user_42") is None
        assert resets == [1]

    def test_version_compared_as_text(self, memory, bounded, large, stats, resets) -> None:
        bounded.put_raw(VERSION_RECORD_KEY, "7")
        gate = make_gate(memory, bounded, large, 7, stats, resets)
        assert gate.run() is False

    def test_unavailable_bounded_tier(self, tmp_path: Path, memory, stats, resets) -> None:
        """
        SCENARIO: Bounded tier cannot be opened
        EXPECTED: Memory is still wiped and no exception escapes
        """
        blocked = tmp_path / "blocked"
        blocked.write_text("")
        memory.put(CacheEntry.create(f"{PREFIX}a", 1, ttl=60.0, now=0.0))

        gate = make_gate(memory, BoundedDiskStore(blocked, 1000), None, "1", stats, resets)

        assert gate.run() is True
        assert len(memory) == 0
        assert gate.read_persisted_version() is None
