"""
Version Gate - Schema-Version Invalidation at Startup.

Cached payloads change shape between deployments. The application owns
CACHE_SCHEMA_VERSION and bumps it whenever that happens; on the first
start with a new value, everything cached under the old value is wiped
before anything reads it.

Design Notes:
    - Runs once per process, before the first read
    - Volatile and bounded tiers are wiped synchronously
    - The large item tier wipe is scheduled for when its connection opens
    - The version record lives under a reserved key outside the entry prefix
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from lms_cache.caching.stats import StatsCollector
    from lms_cache.interfaces.storage import BoundedStore, LargeItemBackend, VolatileTier

logger = logging.getLogger(__name__)

# Bump whenever the shape of cached payloads changes
CACHE_SCHEMA_VERSION = "1"

VERSION_RECORD_KEY = "__lms_cache_schema_version__"


class VersionGate:
    """
    Compares the build-time schema version against the persisted one.

    Returns True from run() when a wipe happened.
    """

    def __init__(
        self,
        memory: VolatileTier,
        bounded: BoundedStore,
        large: Optional[LargeItemBackend],
        prefix: str,
        current_version: str = CACHE_SCHEMA_VERSION,
        stats: Optional[StatsCollector] = None,
        on_reset: Optional[Callable[[int], None]] = None,
    ) -> None:
        """
        Initialize version gate.

        Args:
            memory: Volatile tier
            bounded: Bounded-durable tier, also holds the version record
            large: Large item tier (optional)
            prefix: Entry key prefix to wipe
            current_version: Version compiled into this build
            stats: Collector that counts the wipe as a clear
            on_reset: Called with the number of wiped durable entries
        """
        self.memory = memory
        self.bounded = bounded
        self.large = large
        self.prefix = prefix
        self.current_version = str(current_version)
        self.stats = stats
        self.on_reset = on_reset
        self._checked = False

    @property
    def checked(self) -> bool:
        return self._checked

    def read_persisted_version(self) -> Optional[str]:
        """Last version written by any process, or None."""
        result = self.bounded.get_raw(VERSION_RECORD_KEY)
        if not result.ok or result.value is None:
            return None
        return str(result.value)

    def run(self) -> bool:
        """
        Check the persisted version once; wipe all tiers on mismatch.

        Returns:
            True if caches were wiped
        """
        if self._checked:
            return False
        self._checked = True

        persisted = self.read_persisted_version()
        if persisted == self.current_version:
            logger.debug(f"Cache schema version {persisted} unchanged")
            return False

        self.memory.clear()
        removed = self.bounded.clear(self.prefix).unwrap_or(0)
        if self.large is not None:
            self.large.schedule_clear(self.prefix)

        written = self.bounded.put_raw(VERSION_RECORD_KEY, self.current_version)
        if not written.ok:
            logger.warning(f"Could not persist cache schema version: {written.error}")

        if self.stats is not None:
            self.stats.record_clear()

        logger.info(
            f"Cache schema version changed ({persisted or 'none'} -> "
            f"{self.current_version}); cleared {removed} persistent entries"
        )
        if self.on_reset is not None:
            self.on_reset(removed)
        return True
