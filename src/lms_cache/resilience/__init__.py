"""
Resilience Layer.

Explicit result/error variants used between storage backends and the
cache core, so that every backend failure degrades to a cache miss.
"""

from lms_cache.resilience.result import CacheError, CacheErrorKind, Result

__all__ = [
    "CacheError",
    "CacheErrorKind",
    "Result",
]
