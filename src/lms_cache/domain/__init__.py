"""
Domain Layer - Core Cache Entities.

Entities:
    - CacheEntry: Generic payload container with createdAt/ttl/expiresAt
"""

from lms_cache.domain.entities import CacheEntry, read_created_at, size_in_bytes

__all__ = [
    "CacheEntry",
    "read_created_at",
    "size_in_bytes",
]
