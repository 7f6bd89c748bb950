"""
Tiered Store - Volatile, Bounded-Durable and Large-Item-Durable Tiers.

Read path:
    memory -> bounded disk (sync) -> large item store (async only)
    Durable hits are promoted into memory; expired records are removed
    as they are found.

Write path:
    Every write lands in memory first. The serialized entry then goes
    to the large item store if it exceeds the size threshold, otherwise
    to the bounded store after evicting enough old entries to stay
    inside the capacity budget.

Design Notes:
    - A key's durable copy lives in exactly one durable tier
    - Durable failures never raise; they degrade to memory-only or a miss
    - Large-tier writes from sync callers are fire-and-forget tasks
    - Keys without the entry prefix are stored under it, so clears,
      eviction and the version gate reach every entry
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set, Tuple

from lms_cache.caching.eviction import EvictionManager
from lms_cache.caching.keys import type_label_of
from lms_cache.caching.stats import CacheStats, StatsCollector
from lms_cache.domain.entities import CacheEntry, size_in_bytes
from lms_cache.interfaces.storage import BoundedStore, LargeItemBackend, VolatileTier
from lms_cache.resilience.result import CacheErrorKind, Result

logger = logging.getLogger(__name__)


class TieredStore:
    """
    Cache store spanning three storage tiers.

    Usage:
        store = TieredStore(MemoryTier(), BoundedDiskStore(path, quota), ...)
        store.set(key, payload, ttl_seconds=600)
        store.get(key)               # memory + bounded tier
        await store.get_async(key)   # also consults the large item tier
    """

    def __init__(
        self,
        memory: VolatileTier,
        bounded: BoundedStore,
        large: Optional[LargeItemBackend] = None,
        *,
        prefix: str,
        capacity_bytes: int,
        large_threshold_bytes: int,
        default_ttl_seconds: float,
        aggressive_eviction_ratio: float = 0.25,
        stats: Optional[StatsCollector] = None,
        clock: Callable[[], float] = time.time,
        log_access: bool = False,
    ) -> None:
        self.memory = memory
        self.bounded = bounded
        self.large = large
        self.prefix = prefix
        self.capacity_bytes = capacity_bytes
        self.large_threshold_bytes = large_threshold_bytes
        self.default_ttl_seconds = default_ttl_seconds
        self.aggressive_eviction_ratio = aggressive_eviction_ratio
        self.stats = stats or StatsCollector()
        self.clock = clock
        self.log_access = log_access
        self.evictor = EvictionManager(bounded, memory, prefix, self.stats)

        self._pending: Set[asyncio.Task] = set()
        # latest scheduled large write per key; superseded writes are dropped
        self._large_writes: Dict[str, object] = {}

    # --- Reads ---

    def get(self, key: str) -> Optional[Any]:
        """Cached data from memory or the bounded tier, or None."""
        entry = self.get_entry(key)
        return entry.data if entry is not None else None

    async def get_async(self, key: str) -> Optional[Any]:
        """Cached data from any tier, or None."""
        entry = await self.get_entry_async(key)
        return entry.data if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        """Like get(), but returns the entry so None payloads are distinguishable."""
        key = self.qualify(key)
        entry, expired = self._lookup(key)
        return self._count(key, entry, expired)

    async def get_entry_async(self, key: str) -> Optional[CacheEntry[Any]]:
        key = self.qualify(key)
        entry, expired = self._lookup(key)
        if entry is None and self.large is not None:
            entry, large_expired = await self._lookup_large(key)
            expired = expired or large_expired
        return self._count(key, entry, expired)

    def qualify(self, key: str) -> str:
        """Key as stored: plain keys are moved under the entry prefix."""
        return key if key.startswith(self.prefix) else f"{self.prefix}{key}"

    def _lookup(self, key: str) -> Tuple[Optional[CacheEntry[Any]], bool]:
        """Memory then bounded tier; the flag tells whether an expired copy was dropped."""
        now = self.clock()
        expired = False

        entry = self.memory.get(key)
        if entry is not None:
            if entry.is_valid(now):
                self._trace("HIT (memory)", key)
                return entry, False
            self.memory.delete(key)
            expired = True
            self._trace("EXPIRED (memory)", key)

        raw = self.bounded.get_raw(key)
        if not raw.ok or raw.value is None:
            return None, expired

        decoded = self._decode(key, raw.value)
        if not decoded.ok:
            logger.warning(f"Removing unreadable cache record {key}: {decoded.error}")
            self.bounded.delete(key)
            return None, expired

        entry = decoded.value
        if entry.is_valid(now):
            self.memory.put(entry)
            self._trace("HIT (persistent)", key)
            return entry, expired

        self.bounded.delete(key)
        self._trace("EXPIRED (persistent)", key)
        return None, True

    async def _lookup_large(self, key: str) -> Tuple[Optional[CacheEntry[Any]], bool]:
        raw = await self.large.get_raw(key)
        if not raw.ok or raw.value is None:
            return None, False

        decoded = self._decode(key, raw.value)
        if not decoded.ok:
            logger.warning(f"Removing unreadable large cache record {key}: {decoded.error}")
            await self.large.delete(key)
            return None, False

        entry = decoded.value
        if entry.is_valid(self.clock()):
            self.memory.put(entry)
            self._trace("HIT (large)", key)
            return entry, False

        await self.large.delete(key)
        self._trace("EXPIRED (large)", key)
        return None, True

    def _count(
        self, key: str, entry: Optional[CacheEntry[Any]], expired: bool = False
    ) -> Optional[CacheEntry[Any]]:
        if entry is None:
            if expired:
                # one logical expiry, however many tiers held a copy
                self.stats.record_expired()
            self.stats.record_miss()
            self._trace("MISS", key)
        else:
            self.stats.record_hit()
        return entry

    # --- Writes ---

    def set(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store data; memory is updated before this returns.

        Large entries are written in the background when an event loop
        is running, and inline otherwise.
        """
        key = self.qualify(key)
        raw = self._stage(key, data, ttl_seconds)
        if raw is None:
            return
        if self._is_large(raw):
            self._spawn(self._write_large(key, raw, self._claim_large_write(key)))
        else:
            self._write_bounded(key, raw)

    async def set_async(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store data and wait for the durable write to settle."""
        key = self.qualify(key)
        raw = self._stage(key, data, ttl_seconds)
        if raw is None:
            return
        if self._is_large(raw):
            await self._write_large(key, raw, self._claim_large_write(key))
        else:
            self._write_bounded(key, raw)

    def _stage(self, key: str, data: Any, ttl_seconds: Optional[float]) -> Optional[str]:
        """Mirror into memory and serialize; None means memory-only."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        entry = CacheEntry.create(key, data, ttl, self.clock())
        self.memory.put(entry)

        encoded = self._encode(entry)
        if not encoded.ok:
            logger.warning(f"Keeping {key} in memory only: {encoded.error}")
            return None

        self._trace(f"SET ({size_in_bytes(encoded.value)} bytes, TTL={ttl}s)", key)
        return encoded.value

    def _is_large(self, raw: str) -> bool:
        return self.large is not None and size_in_bytes(raw) > self.large_threshold_bytes

    def _write_bounded(self, key: str, raw: str) -> bool:
        """Write to the bounded tier, evicting as needed. Returns success."""
        self._claim_small_write(key)
        if not self.bounded.available:
            return False

        footprint = self.bounded.footprint(key, raw)
        projected = self.bounded.used_bytes() - self.bounded.stored_bytes(key) + footprint
        if projected > self.capacity_bytes:
            self.evictor.evict(projected - self.capacity_bytes, protect=key)

        result = self.bounded.put_raw(key, raw)
        if result.is_error(CacheErrorKind.QUOTA_EXCEEDED):
            logger.warning(f"Persistent cache quota exceeded writing {key}, evicting harder")
            aggressive = footprint + int(self.capacity_bytes * self.aggressive_eviction_ratio)
            self.evictor.evict(aggressive, protect=key)
            result = self.bounded.put_raw(key, raw)

        if not result.ok:
            if result.is_error(CacheErrorKind.QUOTA_EXCEEDED):
                logger.warning(f"Keeping {key} in memory only: {result.error}")
            else:
                logger.debug(f"Persistent write skipped for {key}: {result.error}")
            return False
        return True

    async def _write_large(self, key: str, raw: str, token: object) -> bool:
        if self._large_writes.get(key) is not token:
            # superseded by a later write of the same key
            return False
        self._large_writes.pop(key, None)
        self.bounded.delete(key)

        result = await self.large.put_raw(key, raw)
        if not result.ok:
            logger.warning(f"Large item write failed for {key}, keeping it in memory only: {result.error}")
            return False
        return True

    def _claim_large_write(self, key: str) -> object:
        token = object()
        self._large_writes[key] = token
        return token

    def _claim_small_write(self, key: str) -> None:
        """A small write supersedes any large copy of the same key."""
        self._large_writes.pop(key, None)
        if self.large is not None:
            self.large.schedule_delete(key)

    # --- Removal ---

    def delete(self, key: str) -> None:
        """Remove key from every tier; the large tier is cleaned up lazily."""
        key = self.qualify(key)
        self.memory.delete(key)
        self.bounded.delete(key)
        self._large_writes.pop(key, None)
        if self.large is not None:
            self.large.schedule_delete(key)

    async def delete_async(self, key: str) -> None:
        key = self.qualify(key)
        self.delete(key)
        if self.large is not None:
            await self.large.delete(key)

    def clear_local(self) -> int:
        """Wipe memory and the bounded tier; returns bounded entries removed."""
        self.memory.clear()
        return self.bounded.clear(self.prefix).unwrap_or(0)

    async def clear_all(self) -> int:
        """Wipe every tier, waiting for pending large writes first."""
        await self.flush()
        removed = self.clear_local()
        if self.large is not None:
            removed += (await self.large.clear(self.prefix)).unwrap_or(0)
        return removed

    def clear_by_type(self, type_label: str) -> int:
        """
        Remove entries derived from type_label from memory and the bounded
        tier, and schedule the same for the large item tier.

        Returns:
            Number of memory and bounded entries removed
        """
        matches = self._type_filter(type_label)
        removed = 0

        for key in self.memory.keys():
            if matches(key) and self.memory.delete(key):
                removed += 1

        for key in self.bounded.keys(self.prefix).unwrap_or([]):
            if matches(key) and self.bounded.delete(key).unwrap_or(False):
                removed += 1

        for key in [k for k in self._large_writes if matches(k)]:
            self._large_writes.pop(key, None)
        if self.large is not None:
            self.large.schedule_clear(self.prefix, matches)

        return removed

    async def clear_by_type_async(self, type_label: str) -> int:
        await self.flush()
        removed = self.clear_by_type(type_label)
        if self.large is not None:
            # runs the clear scheduled above
            await self.large.connect()
        return removed

    def purge_expired(self) -> int:
        """Remove expired and unreadable records from memory and the bounded tier."""
        now = self.clock()
        purged = 0

        for key in self.memory.keys():
            entry = self.memory.get(key)
            if entry is not None and not entry.is_valid(now):
                self.memory.delete(key)
                purged += 1

        for key, raw in self.bounded.items(self.prefix).unwrap_or([]):
            decoded = self._decode(key, raw)
            if not decoded.ok or not decoded.value.is_valid(now):
                self.bounded.delete(key)
                purged += 1

        if purged:
            logger.info(f"Purged {purged} expired cache entries")
        return purged

    def _type_filter(self, type_label: str) -> Callable[[str], bool]:
        prefix = self.prefix
        return lambda key: type_label_of(key, prefix) == type_label

    # --- Background work ---

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Background cache write failed: {task.exception()!r}")

    async def flush(self) -> None:
        """Wait for every pending background write."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    # --- Statistics ---

    def get_stats(self) -> CacheStats:
        return self.stats.snapshot(
            memory_entries=len(self.memory),
            persistent_entries=self.bounded.count(self.prefix),
        )

    async def get_stats_async(self) -> CacheStats:
        """Like get_stats(), also counting large item entries."""
        stats = self.get_stats()
        if self.large is not None:
            stats.large_entries = await self.large.count(self.prefix)
        return stats

    def persistent_keys(self) -> List[str]:
        return self.bounded.keys(self.prefix).unwrap_or([])

    # --- Helpers ---

    @staticmethod
    def _encode(entry: CacheEntry[Any]) -> Result[str]:
        try:
            return Result.success(entry.serialize())
        except (TypeError, ValueError) as e:
            return Result.failure(
                CacheErrorKind.SERIALIZATION_FAILURE, f"cannot serialize {entry.key}", e
            )

    @staticmethod
    def _decode(key: str, raw: Any) -> Result[CacheEntry[Any]]:
        try:
            return Result.success(CacheEntry.deserialize(key, raw))
        except ValueError as e:
            return Result.failure(
                CacheErrorKind.DESERIALIZATION_FAILURE, f"cannot parse {key}", e
            )

    def _trace(self, event: str, key: str) -> None:
        if self.log_access:
            logger.debug(f"Cache {event}: {key}")
