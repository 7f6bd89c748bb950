"""
Performance Tests for the Tiered Store.

Benchmarks:
    - Memory hits vs bounded-tier reads
    - Eviction cost when the bounded tier is full
"""

from __future__ import annotations

import time

import pytest

from lms_cache.caching.keys import generate_key


@pytest.mark.performance
class TestCachePerformance:
    """Timing checks with generous ceilings."""

    def test_memory_hits_are_fast(self, store) -> None:
        keys = [generate_key("user", {"id": i}) for i in range(200)]
        for key in keys:
            store.set(key, {"id": key})

        start = time.perf_counter()
        for _ in range(10):
            for key in keys:
                assert store.get(key) is not None
        elapsed = time.perf_counter() - start

        print(f"\n2000 memory hits: {elapsed * 1000:.1f}ms")
        assert elapsed < 1.0

    def test_memory_faster_than_disk(self, store) -> None:
        keys = [generate_key("user", {"id": i}) for i in range(200)]
        for key in keys:
            store.set(key, {"id": key, "name": "x" * 100})

        start = time.perf_counter()
        for key in keys:
            store.get(key)
        memory_time = time.perf_counter() - start

        store.memory.clear()
        start = time.perf_counter()
        for key in keys:
            store.get(key)
        disk_time = time.perf_counter() - start

        print(f"\nMemory: {memory_time * 1000:.1f}ms, disk: {disk_time * 1000:.1f}ms")
        assert memory_time < disk_time

    def test_writes_under_eviction_pressure(self, store, clock) -> None:
        """Every write past the budget triggers a full rescan."""
        store.capacity_bytes = 5_000

        start = time.perf_counter()
        for i in range(200):
            clock.advance(1.0)
            store.set(generate_key("user", {"id": i}), "x" * 200)
        elapsed = time.perf_counter() - start

        print(f"\n200 writes with eviction: {elapsed * 1000:.1f}ms")
        assert store.bounded.used_bytes() <= 5_000
        assert elapsed < 10.0
