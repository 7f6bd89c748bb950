"""
Memory Tier - Volatile In-Process Entry Store.

Holds parsed CacheEntry objects for the lifetime of the process.

Design Notes:
    - OrderedDict keeps recency order for optional entry-count trimming
    - Reentrant lock so the tier can be shared with worker threads
    - Expiry is not checked here; the tiered store owns TTL semantics
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, List, Optional

from lms_cache.domain.entities import CacheEntry

logger = logging.getLogger(__name__)


class MemoryTier:
    """
    Volatile tier backed by an ordered dict.

    When max_entries is set, the least recently used entries are dropped
    once the bound is exceeded. Durable copies are unaffected.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        """
        Initialize memory tier.

        Args:
            max_entries: Entry bound (None or 0 for unbounded)
        """
        self.max_entries = max_entries or None
        self._entries: OrderedDict[str, CacheEntry[Any]] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CacheEntry[Any]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, entry: CacheEntry[Any]) -> None:
        with self._lock:
            self._entries[entry.key] = entry
            self._entries.move_to_end(entry.key)
            self._trim()

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Remove everything; returns the number of entries dropped."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def _trim(self) -> None:
        """Drop least recently used entries past the bound (must hold lock)."""
        if self.max_entries is None:
            return
        while len(self._entries) > self.max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug(f"Memory tier TRIMMED (LRU): {key}")
