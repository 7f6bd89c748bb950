"""
Unit Tests for the Durable Tiers.

Tests for:
    - BoundedDiskStore quota enforcement and size tracking
    - LargeItemStore lazy connection and scheduled work
    - Unavailable backends degrading to Result failures
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lms_cache.adapters.disk_store import BoundedDiskStore
from lms_cache.adapters.large_item_store import LargeItemStore
from lms_cache.resilience.result import CacheErrorKind

PREFIX = "lms_cache_"


@pytest.fixture
def blocked_path(tmp_path: Path) -> Path:
    """A path that exists as a regular file, so no cache can open there."""
    path = tmp_path / "blocked"
    path.write_text("not a directory")
    return path


class TestBoundedDiskStore:
    """Tests for BoundedDiskStore."""

    def test_put_and_get(self, bounded) -> None:
        assert bounded.put_raw(f"{PREFIX}a", "hello").ok
        assert bounded.get_raw(f"{PREFIX}a").value == "hello"

    def test_missing_key_is_empty_success(self, bounded) -> None:
        result = bounded.get_raw(f"{PREFIX}missing")
        assert result.ok
        assert result.value is None

    def test_tracks_used_bytes(self, bounded) -> None:
        bounded.put_raw(f"{PREFIX}a", "x" * 100)
        expected = bounded.footprint(f"{PREFIX}a", "x" * 100)
        assert bounded.used_bytes() == expected
        assert bounded.stored_bytes(f"{PREFIX}a") == expected

        bounded.put_raw(f"{PREFIX}a", "x" * 10)
        assert bounded.used_bytes() == bounded.footprint(f"{PREFIX}a", "x" * 10)

        bounded.delete(f"{PREFIX}a")
        assert bounded.used_bytes() == 0

    def test_rejects_write_past_quota(self, tmp_path: Path) -> None:
        store = BoundedDiskStore(tmp_path / "small", quota_bytes=100)
        assert store.put_raw("k1", "x" * 50).ok

        result = store.put_raw("k2", "x" * 60)

        assert result.is_error(CacheErrorKind.QUOTA_EXCEEDED)
        assert store.get_raw("k2").value is None
        store.close()

    def test_overwrite_counts_only_new_size(self, tmp_path: Path) -> None:
        store = BoundedDiskStore(tmp_path / "small", quota_bytes=100)
        assert store.put_raw("k1", "x" * 90).ok
        assert store.put_raw("k1", "y" * 95).ok
        store.close()

    def test_keys_filtered_by_prefix(self, bounded) -> None:
        bounded.put_raw(f"{PREFIX}a", "1")
        bounded.put_raw("__reserved__", "2")
        assert bounded.keys(PREFIX).value == [f"{PREFIX}a"]
        assert bounded.count(PREFIX) == 1

    def test_clear_by_prefix_keeps_other_keys(self, bounded) -> None:
        bounded.put_raw(f"{PREFIX}a", "1")
        bounded.put_raw(f"{PREFIX}b", "2")
        bounded.put_raw("__reserved__", "3")

        assert bounded.clear(PREFIX).value == 2
        assert bounded.get_raw("__reserved__").value == "3"

    def test_sizes_survive_reopen(self, tmp_path: Path) -> None:
        first = BoundedDiskStore(tmp_path / "p", quota_bytes=10_000)
        first.put_raw(f"{PREFIX}a", "x" * 200)
        used = first.used_bytes()
        first.close()

        second = BoundedDiskStore(tmp_path / "p", quota_bytes=10_000)
        assert second.used_bytes() == used
        second.close()

    def test_unavailable_backend(self, blocked_path: Path) -> None:
        store = BoundedDiskStore(blocked_path, quota_bytes=1000)

        assert not store.available
        assert store.get_raw("k").is_error(CacheErrorKind.PLATFORM_UNAVAILABLE)
        assert store.put_raw("k", "v").is_error(CacheErrorKind.PLATFORM_UNAVAILABLE)
        assert store.keys(PREFIX).unwrap_or([]) == []
        assert store.count(PREFIX) == 0


class TestLargeItemStore:
    """Tests for LargeItemStore."""

    @pytest.mark.asyncio
    async def test_opens_lazily(self, large) -> None:
        assert not large.connected
        assert (await large.put_raw(f"{PREFIX}a", "payload")).ok
        assert large.connected
        assert (await large.get_raw(f"{PREFIX}a")).value == "payload"

    @pytest.mark.asyncio
    async def test_scheduled_clear_runs_on_connect(self, tmp_path: Path) -> None:
        first = LargeItemStore(tmp_path / "large")
        await first.put_raw(f"{PREFIX}a", "1")
        await first.put_raw("__other__", "2")
        await first.close()

        second = LargeItemStore(tmp_path / "large")
        second.schedule_clear(PREFIX)

        assert (await second.get_raw(f"{PREFIX}a")).value is None
        assert (await second.get_raw("__other__")).value == "2"

    @pytest.mark.asyncio
    async def test_scheduled_clear_with_filter(self, large) -> None:
        await large.put_raw(f"{PREFIX}keep", "1")
        await large.put_raw(f"{PREFIX}drop", "2")

        large.schedule_clear(PREFIX, lambda key: key.endswith("drop"))
        assert await large.connect()

        assert (await large.keys(PREFIX)).value == [f"{PREFIX}keep"]

    @pytest.mark.asyncio
    async def test_scheduled_delete(self, large) -> None:
        await large.put_raw(f"{PREFIX}a", "1")
        large.schedule_delete(f"{PREFIX}a")
        assert (await large.get_raw(f"{PREFIX}a")).value is None

    @pytest.mark.asyncio
    async def test_clear_and_count(self, large) -> None:
        await large.put_raw(f"{PREFIX}a", "1")
        await large.put_raw(f"{PREFIX}b", "2")
        assert await large.count(PREFIX) == 2
        assert (await large.clear(PREFIX)).value == 2
        assert await large.count(PREFIX) == 0

    @pytest.mark.asyncio
    async def test_unavailable_backend(self, blocked_path: Path) -> None:
        store = LargeItemStore(blocked_path)

        result = await store.get_raw("k")

        assert result.is_error(CacheErrorKind.PLATFORM_UNAVAILABLE)
        assert not store.available
        assert (await store.put_raw("k", "v")).is_error(CacheErrorKind.PLATFORM_UNAVAILABLE)
        assert await store.count(PREFIX) == 0
