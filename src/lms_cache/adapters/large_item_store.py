"""
Large Item Store - Asynchronous Durable Tier.

Holds records whose serialized size exceeds the bounded tier's
threshold. The diskcache connection is opened lazily on first use, in a
worker thread, and every operation runs off the event loop via
asyncio.to_thread so only the awaiting caller is suspended.

Design Notes:
    - Deletes and clears can be scheduled synchronously; they run once
      the connection is open, before any other operation
    - Open failure marks the tier unavailable for the process lifetime
    - No timeout or cancellation on pending operations
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple, TypeVar, Union

import diskcache as dc

from lms_cache.adapters.disk_store import BACKEND_ERRORS, open_disk_cache
from lms_cache.interfaces.storage import matching
from lms_cache.resilience.result import CacheErrorKind, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

KeyFilter = Callable[[str], bool]


class LargeItemStore:
    """Large-item-durable tier backed by a lazily opened diskcache."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)
        self._cache: Optional[dc.Cache] = None
        self._failed = False
        self._pending_clears: List[Tuple[str, Optional[KeyFilter]]] = []
        self._pending_deletes: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        """False only once opening has been attempted and failed."""
        return not self._failed

    @property
    def connected(self) -> bool:
        return self._cache is not None

    def schedule_clear(self, prefix: str, key_filter: Optional[KeyFilter] = None) -> None:
        """Clear keys under prefix (optionally filtered) on the next operation."""
        with self._lock:
            if not self._failed:
                self._pending_clears.append((prefix, key_filter))
        logger.debug(f"Large item clear scheduled for prefix '{prefix}'")

    def schedule_delete(self, key: str) -> None:
        """Delete key on the next operation."""
        with self._lock:
            if not self._failed:
                self._pending_deletes.add(key)

    async def connect(self) -> bool:
        """Open the connection and run scheduled work."""
        return await asyncio.to_thread(self._ensure_open)

    async def get_raw(self, key: str) -> Result[str]:
        return await self._run(lambda cache: cache.get(key), f"read {key}")

    async def put_raw(self, key: str, raw: str) -> Result[None]:
        result = await self._run(lambda cache: cache.set(key, raw), f"write {key}")
        if result.ok:
            return Result.success()
        if self.available:
            # connection is open, so a failed write is a rejected write
            return Result.failure(
                CacheErrorKind.QUOTA_EXCEEDED, result.error.message, result.error.cause
            )
        return Result(error=result.error)

    async def delete(self, key: str) -> Result[bool]:
        result = await self._run(lambda cache: cache.delete(key), f"delete {key}")
        return Result.success(bool(result.value)) if result.ok else result

    async def keys(self, prefix: str) -> Result[List[str]]:
        return await self._run(
            lambda cache: matching(cache.iterkeys(), prefix), "key scan"
        )

    async def clear(self, prefix: str, key_filter: Optional[KeyFilter] = None) -> Result[int]:
        return await self._run(
            lambda cache: self._clear_matching(cache, prefix, key_filter), "clear"
        )

    async def count(self, prefix: str) -> int:
        return len((await self.keys(prefix)).unwrap_or([]))

    async def close(self) -> None:
        await asyncio.to_thread(self._close_sync)

    async def _run(self, operation: Callable[[dc.Cache], T], label: str) -> Result[T]:
        return await asyncio.to_thread(self._run_sync, operation, label)

    def _run_sync(self, operation: Callable[[dc.Cache], T], label: str) -> Result[T]:
        if not self._ensure_open():
            return Result.failure(
                CacheErrorKind.PLATFORM_UNAVAILABLE,
                f"large item store at {self.directory} is not available",
            )
        try:
            return Result.success(operation(self._cache))
        except BACKEND_ERRORS as e:
            return Result.failure(
                CacheErrorKind.PLATFORM_UNAVAILABLE, f"{label} failed", e
            )

    def _ensure_open(self) -> bool:
        with self._lock:
            if self._failed:
                return False
            if self._cache is None:
                try:
                    self._cache = open_disk_cache(self.directory)
                    logger.info(f"Large item store opened at {self.directory}")
                except BACKEND_ERRORS as e:
                    logger.warning(
                        f"Large item store unavailable at {self.directory}: {e}"
                    )
                    self._failed = True
                    self._pending_clears.clear()
                    self._pending_deletes.clear()
                    return False
            self._run_scheduled()
            return True

    def _run_scheduled(self) -> None:
        """Apply scheduled clears and deletes (must hold lock)."""
        try:
            while self._pending_clears:
                prefix, key_filter = self._pending_clears.pop(0)
                removed = self._clear_matching(self._cache, prefix, key_filter)
                logger.info(f"Large item store cleared {removed} entries under '{prefix}'")
            while self._pending_deletes:
                self._cache.delete(self._pending_deletes.pop())
        except BACKEND_ERRORS as e:
            logger.warning(f"Scheduled large item cleanup failed: {e}")

    @staticmethod
    def _clear_matching(
        cache: dc.Cache,
        prefix: str,
        key_filter: Optional[KeyFilter],
    ) -> int:
        removed = 0
        for key in matching(cache.iterkeys(), prefix):
            if key_filter is not None and not key_filter(key):
                continue
            if cache.delete(key):
                removed += 1
        return removed

    def _close_sync(self) -> None:
        with self._lock:
            if self._cache is not None:
                self._cache.close()
                self._cache = None
