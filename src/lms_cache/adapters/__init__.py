"""
Adapters Package - Infrastructure Implementations.

Concrete implementations of the storage protocols defined in the
interfaces package, plus the memoizing producer wrapper.

Tiers:
    - MemoryTier: Volatile in-process entries
    - BoundedDiskStore: diskcache-backed, synchronous, hard quota
    - LargeItemStore: diskcache-backed, asynchronous, lazily opened

Wrappers:
    - CachedProducer: Caches an async producer's results
"""

from lms_cache.adapters.cached_producer import CachedProducer
from lms_cache.adapters.disk_store import BoundedDiskStore
from lms_cache.adapters.large_item_store import LargeItemStore
from lms_cache.adapters.memory_tier import MemoryTier

__all__ = [
    "BoundedDiskStore",
    "CachedProducer",
    "LargeItemStore",
    "MemoryTier",
]
