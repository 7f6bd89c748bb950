"""
Cache Statistics.

Process-lifetime counters used for observability only; nothing in the
cache reads them to make decisions. Counters are instance fields so
independent caches never share state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class CacheStats:
    """Point-in-time view of cache statistics."""

    hits: int = 0
    misses: int = 0
    expired: int = 0
    clears: int = 0
    evictions: int = 0
    memory_entries: int = 0
    persistent_entries: int = 0
    large_entries: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, including hit_rate."""
        data = asdict(self)
        data["hit_rate"] = self.hit_rate
        return data


class StatsCollector:
    """Mutable counters behind CacheStats."""

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.expired = 0
        self.clears = 0
        self.evictions = 0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_expired(self) -> None:
        self.expired += 1

    def record_clear(self) -> None:
        self.clears += 1

    def record_eviction(self, count: int = 1) -> None:
        self.evictions += count

    def reset(self) -> None:
        self.hits = self.misses = self.expired = self.clears = self.evictions = 0

    def snapshot(
        self,
        memory_entries: int = 0,
        persistent_entries: int = 0,
        large_entries: int = 0,
    ) -> CacheStats:
        """Combine counters with current tier sizes."""
        return CacheStats(
            hits=self.hits,
            misses=self.misses,
            expired=self.expired,
            clears=self.clears,
            evictions=self.evictions,
            memory_entries=memory_entries,
            persistent_entries=persistent_entries,
            large_entries=large_entries,
        )
