"""
Cache Service - Public Facade over the Tiered Store.

One CacheService is built at application startup and handed to every
consumer; there is no module-level instance.

Usage:
    cache = create_cache_service(load_config("config/cache.yaml"))

    fetch_users = cache.cached(api.get_company_users, "company_users", 600)
    users = await fetch_users(company_id)

    cache.clear_by_type("company_users")
    print(cache.get_stats().hit_rate)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

from lms_cache.adapters.cached_producer import CachedProducer, Producer
from lms_cache.adapters.disk_store import BoundedDiskStore
from lms_cache.adapters.large_item_store import LargeItemStore
from lms_cache.adapters.memory_tier import MemoryTier
from lms_cache.caching.keys import generate_key
from lms_cache.caching.stats import CacheStats, StatsCollector
from lms_cache.caching.tiered_store import TieredStore
from lms_cache.config.models import CacheSettings
from lms_cache.observability.version_gate import VersionGate
from lms_cache.service.events import CacheEvent, CacheEventKind, CacheListener, EventEmitter

logger = logging.getLogger(__name__)


class CacheService:
    """
    Client-side response cache for the learning-management API.

    Every operation degrades to a cache miss on storage failure; callers
    never see storage exceptions.
    """

    def __init__(
        self,
        store: TieredStore,
        version_gate: VersionGate,
        purge_expired_on_start: bool = True,
        events: Optional[EventEmitter] = None,
    ) -> None:
        """
        Initialize cache service.

        Args:
            store: Tiered store holding the entries
            version_gate: Gate run once by start()
            purge_expired_on_start: Drop expired records during start()
            events: Emitter for clear notifications
        """
        self.store = store
        self.version_gate = version_gate
        self.purge_expired_on_start = purge_expired_on_start
        self.events = events or EventEmitter()
        self._started = False

        if self.version_gate.on_reset is None:
            self.version_gate.on_reset = self._on_version_reset

    @property
    def prefix(self) -> str:
        return self.store.prefix

    @property
    def stats(self) -> StatsCollector:
        return self.store.stats

    def start(self) -> None:
        """Run the version gate and the expired-entry purge, once."""
        if self._started:
            return
        self._started = True
        self.version_gate.run()
        if self.purge_expired_on_start:
            self.store.purge_expired()

    def generate_key(self, type_label: str, params: Mapping[str, Any]) -> str:
        return generate_key(type_label, params, prefix=self.prefix)

    def get(self, key: str) -> Optional[Any]:
        return self.store.get(key)

    async def get_async(self, key: str) -> Optional[Any]:
        return await self.store.get_async(key)

    def set(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        self.store.set(key, data, ttl_seconds)

    async def set_async(self, key: str, data: Any, ttl_seconds: Optional[float] = None) -> None:
        await self.store.set_async(key, data, ttl_seconds)

    def delete(self, key: str) -> None:
        self.store.delete(key)

    async def delete_async(self, key: str) -> None:
        await self.store.delete_async(key)

    async def clear_all(self) -> int:
        """Wipe every tier."""
        removed = await self.store.clear_all()
        self.stats.record_clear()
        logger.info(f"Cleared {removed} cache entries")
        self.events.emit(CacheEvent(CacheEventKind.CLEAR_ALL, removed=removed))
        return removed

    def clear_by_type(self, type_label: str) -> int:
        """Wipe entries derived from type_label; large items are wiped lazily."""
        removed = self.store.clear_by_type(type_label)
        self._after_type_clear(type_label, removed)
        return removed

    async def clear_by_type_async(self, type_label: str) -> int:
        removed = await self.store.clear_by_type_async(type_label)
        self._after_type_clear(type_label, removed)
        return removed

    def purge_expired(self) -> int:
        return self.store.purge_expired()

    def cached(
        self,
        producer: Producer,
        type_label: str,
        ttl_seconds: Optional[float] = None,
    ) -> CachedProducer:
        """Wrap producer so its results are cached under type_label."""
        return CachedProducer(producer, self.store, type_label, ttl_seconds)

    def get_stats(self) -> CacheStats:
        return self.store.get_stats()

    async def get_stats_async(self) -> CacheStats:
        return await self.store.get_stats_async()

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def unsubscribe(self, listener: CacheListener) -> None:
        self.events.unsubscribe(listener)

    async def flush(self) -> None:
        await self.store.flush()

    def close(self) -> None:
        """Close the bounded tier. Use aclose() when large items are in play."""
        self.store.bounded.close()

    async def aclose(self) -> None:
        await self.store.flush()
        if self.store.large is not None:
            await self.store.large.close()
        self.store.bounded.close()

    def _after_type_clear(self, type_label: str, removed: int) -> None:
        self.stats.record_clear()
        logger.info(f"Cleared {removed} {type_label} cache entries")
        self.events.emit(
            CacheEvent(CacheEventKind.CLEAR_BY_TYPE, removed=removed, type_label=type_label)
        )

    def _on_version_reset(self, removed: int) -> None:
        self.events.emit(CacheEvent(CacheEventKind.VERSION_RESET, removed=removed))


def create_cache_service(
    settings: Optional[CacheSettings] = None,
    clock: Callable[[], float] = time.time,
    listener: Optional[CacheListener] = None,
) -> CacheService:
    """
    Build and start a cache service from settings.

    Args:
        settings: Cache settings (defaults if None)
        clock: Time source in epoch seconds
        listener: Optional event listener subscribed before start(),
            so it also sees a version reset

    Returns:
        Started CacheService
    """
    settings = settings or CacheSettings()
    stats = StatsCollector()

    memory = MemoryTier(max_entries=settings.memory.max_entries)
    bounded = BoundedDiskStore(
        settings.persistent.directory,
        quota_bytes=settings.persistent.quota_bytes,
    )
    large = LargeItemStore(settings.large.directory) if settings.large.enabled else None

    store = TieredStore(
        memory,
        bounded,
        large,
        prefix=settings.key_prefix,
        capacity_bytes=settings.persistent.capacity_bytes,
        large_threshold_bytes=settings.large.threshold_bytes,
        default_ttl_seconds=settings.default_ttl_seconds,
        aggressive_eviction_ratio=settings.persistent.aggressive_eviction_ratio,
        stats=stats,
        clock=clock,
        log_access=settings.log_access,
    )
    gate = VersionGate(
        memory,
        bounded,
        large,
        prefix=settings.key_prefix,
        current_version=settings.schema_version,
        stats=stats,
    )

    service = CacheService(
        store,
        gate,
        purge_expired_on_start=settings.purge_expired_on_start,
    )
    if listener is not None:
        service.subscribe(listener)
    service.start()
    return service
