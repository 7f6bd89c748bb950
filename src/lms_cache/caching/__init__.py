"""
Caching Layer.

Provides the cache core:
    - generate_key: Order-independent cache keys
    - TieredStore: Memory, bounded-durable and large-item tiers
    - EvictionManager: Oldest-write-first space reclamation
    - StatsCollector / CacheStats: Hit, miss and eviction counters
"""

from lms_cache.caching.eviction import EvictionManager, EvictionReport
from lms_cache.caching.keys import DEFAULT_KEY_PREFIX, generate_key, type_label_of
from lms_cache.caching.stats import CacheStats, StatsCollector
from lms_cache.caching.tiered_store import TieredStore

__all__ = [
    "CacheStats",
    "DEFAULT_KEY_PREFIX",
    "EvictionManager",
    "EvictionReport",
    "StatsCollector",
    "TieredStore",
    "generate_key",
    "type_label_of",
]
