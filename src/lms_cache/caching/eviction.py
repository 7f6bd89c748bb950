"""
Eviction Manager - Oldest-Write-First Space Reclamation.

Frees bounded-tier capacity by deleting the entries with the oldest
createdAt first. This approximates LRU using write time, so no
access-order index has to be maintained.

Design Notes:
    - Every call rescans the bounded tier
    - Unparseable records are deleted during the scan
    - No lock: concurrent evictions may over-evict, which only costs hit rate
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from lms_cache.domain.entities import read_created_at

if TYPE_CHECKING:
    from lms_cache.caching.stats import StatsCollector
    from lms_cache.interfaces.storage import BoundedStore, VolatileTier

logger = logging.getLogger(__name__)


@dataclass
class EvictionReport:
    """Outcome of one eviction pass."""

    target_bytes: int
    freed_bytes: int = 0
    evicted_keys: List[str] = field(default_factory=list)
    corrupt_keys: List[str] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return self.freed_bytes >= self.target_bytes


class EvictionManager:
    """Deletes oldest-written bounded-tier entries until enough space is freed."""

    def __init__(
        self,
        bounded: BoundedStore,
        memory: VolatileTier,
        prefix: str,
        stats: Optional[StatsCollector] = None,
    ) -> None:
        self.bounded = bounded
        self.memory = memory
        self.prefix = prefix
        self.stats = stats

    def evict(self, target_bytes: int, protect: Optional[str] = None) -> EvictionReport:
        """
        Free at least target_bytes from the bounded tier, if possible.

        Args:
            target_bytes: Bytes to free
            protect: Key that is about to be overwritten and must be kept

        Returns:
            EvictionReport listing evicted and corrupt keys
        """
        report = EvictionReport(target_bytes=target_bytes)

        listed = self.bounded.items(self.prefix)
        if not listed.ok:
            logger.debug(f"Eviction skipped: {listed.error}")
            return report

        candidates: List[Tuple[float, str, int]] = []
        for key, raw in listed.value or []:
            if key == protect:
                continue
            size = self._measure(key, raw)
            try:
                created_at = read_created_at(raw)
            except ValueError as e:
                logger.warning(f"Removing corrupt cache record {key}: {e}")
                self._remove(key)
                report.corrupt_keys.append(key)
                if size is not None:
                    report.freed_bytes += size
                continue
            candidates.append((created_at, key, size or 0))

        candidates.sort()

        for _, key, size in candidates:
            if report.freed_bytes >= target_bytes:
                break
            self._remove(key)
            report.evicted_keys.append(key)
            report.freed_bytes += size

        if self.stats is not None and report.evicted_keys:
            self.stats.record_eviction(len(report.evicted_keys))

        logger.info(
            f"Evicted {len(report.evicted_keys)} entries "
            f"({report.freed_bytes}/{target_bytes} bytes, "
            f"{len(report.corrupt_keys)} corrupt)"
        )
        return report

    def _remove(self, key: str) -> None:
        self.bounded.delete(key)
        self.memory.delete(key)

    def _measure(self, key: str, raw: object) -> Optional[int]:
        if isinstance(raw, str):
            return self.bounded.footprint(key, raw)
        return None
