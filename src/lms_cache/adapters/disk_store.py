"""
Bounded Disk Store - Synchronous Durable Tier with a Hard Quota.

Persists raw record text in a diskcache.Cache directory. The store
itself never evicts (eviction_policy="none"); it rejects writes that
would push usage past quota_bytes and leaves freeing space to the
eviction manager.

Design Notes:
    - Usage is measured as UTF-8 bytes of key plus value
    - Per-key sizes are loaded once at open and maintained incrementally
    - An open failure marks the tier unavailable for the process lifetime
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import diskcache as dc

from lms_cache.domain.entities import size_in_bytes
from lms_cache.interfaces.storage import matching
from lms_cache.resilience.result import CacheErrorKind, Result

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (OSError, sqlite3.Error, dc.Timeout)


def open_disk_cache(directory: Union[str, Path]) -> dc.Cache:
    """Open a diskcache directory that never evicts on its own."""
    return dc.Cache(str(directory), timeout=1, eviction_policy="none")


class BoundedDiskStore:
    """Bounded-durable tier backed by diskcache."""

    def __init__(self, directory: Union[str, Path], quota_bytes: int) -> None:
        """
        Open the store.

        Args:
            directory: Directory holding the cache database
            quota_bytes: Hard ceiling on stored bytes
        """
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes
        self._sizes: Dict[str, int] = {}
        self._used_bytes = 0
        self._cache: Optional[dc.Cache] = None

        try:
            self._cache = open_disk_cache(self.directory)
            self._load_sizes()
            logger.info(
                f"Bounded store opened at {self.directory} "
                f"({self._used_bytes}/{self.quota_bytes} bytes used)"
            )
        except BACKEND_ERRORS as e:
            logger.warning(f"Bounded store unavailable at {self.directory}: {e}")
            self._cache = None
            self._sizes.clear()
            self._used_bytes = 0

    @property
    def available(self) -> bool:
        return self._cache is not None

    def get_raw(self, key: str) -> Result[str]:
        if self._cache is None:
            return self._unavailable()
        try:
            return Result.success(self._cache.get(key))
        except BACKEND_ERRORS as e:
            return Result.failure(
                CacheErrorKind.PLATFORM_UNAVAILABLE, f"read failed for {key}", e
            )

    def put_raw(self, key: str, raw: str) -> Result[None]:
        if self._cache is None:
            return self._unavailable()

        size = self.footprint(key, raw)
        projected = self._used_bytes - self._sizes.get(key, 0) + size
        if projected > self.quota_bytes:
            return Result.failure(
                CacheErrorKind.QUOTA_EXCEEDED,
                f"writing {key} needs {projected} bytes, quota is {self.quota_bytes}",
            )

        try:
            self._cache.set(key, raw)
        except BACKEND_ERRORS as e:
            return Result.failure(
                CacheErrorKind.QUOTA_EXCEEDED, f"write rejected for {key}", e
            )

        self._used_bytes = projected
        self._sizes[key] = size
        return Result.success()

    def delete(self, key: str) -> Result[bool]:
        if self._cache is None:
            return self._unavailable()
        try:
            removed = self._cache.delete(key)
        except BACKEND_ERRORS as e:
            return Result.failure(
                CacheErrorKind.PLATFORM_UNAVAILABLE, f"delete failed for {key}", e
            )
        self._forget(key)
        return Result.success(bool(removed))

    def keys(self, prefix: str) -> Result[List[str]]:
        if self._cache is None:
            return self._unavailable()
        try:
            return Result.success(matching(self._cache.iterkeys(), prefix))
        except BACKEND_ERRORS as e:
            return Result.failure(
                CacheErrorKind.PLATFORM_UNAVAILABLE, "key scan failed", e
            )

    def items(self, prefix: str) -> Result[List[Tuple[str, Any]]]:
        """Key and raw value pairs; values of vanished keys are skipped."""
        listed = self.keys(prefix)
        if not listed.ok:
            return Result(error=listed.error)

        pairs: List[Tuple[str, Any]] = []
        for key in listed.value or []:
            raw = self.get_raw(key)
            if raw.ok and raw.value is not None:
                pairs.append((key, raw.value))
        return Result.success(pairs)

    def clear(self, prefix: str) -> Result[int]:
        """Delete every key under prefix; returns the number removed."""
        listed = self.keys(prefix)
        if not listed.ok:
            return Result(error=listed.error)

        removed = 0
        for key in listed.value or []:
            if self.delete(key).unwrap_or(False):
                removed += 1
        return Result.success(removed)

    def footprint(self, key: str, raw: str) -> int:
        return size_in_bytes(key) + size_in_bytes(raw)

    def stored_bytes(self, key: str) -> int:
        return self._sizes.get(key, 0)

    def used_bytes(self) -> int:
        return self._used_bytes

    def count(self, prefix: str) -> int:
        return len(self.keys(prefix).unwrap_or([]))

    def close(self) -> None:
        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def _load_sizes(self) -> None:
        """Measure every stored record once at open."""
        for key in self._cache.iterkeys():
            value = self._cache.get(key)
            if isinstance(key, str) and isinstance(value, str):
                size = self.footprint(key, value)
                self._sizes[key] = size
                self._used_bytes += size

    def _forget(self, key: str) -> None:
        self._used_bytes -= self._sizes.pop(key, 0)

    def _unavailable(self) -> Result[Any]:
        return Result.failure(
            CacheErrorKind.PLATFORM_UNAVAILABLE,
            f"bounded store at {self.directory} is not available",
        )
