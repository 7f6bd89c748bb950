"""
LMS Cache - Client-Side Response Cache for a Learning-Management API.

Sits in front of the remote API client and keeps its responses across
process restarts, within a hard capacity ceiling on durable storage.

Architecture:
    - Three tiers: process memory, bounded disk, large-item disk
    - Oldest-write-first eviction when the bounded tier is full
    - Schema-version gate that wipes stale payloads at startup
    - Every storage failure degrades to a cache miss

Main Components:
    - service: CacheService facade and factory
    - caching: Keys, tiered store, eviction, statistics
    - adapters: Storage tiers and the memoizing producer wrapper
    - observability: Version gate
    - config: Settings models and YAML loader

Example:
    >>> from lms_cache import create_cache_service, load_config
    >>> cache = create_cache_service(load_config("config/cache.yaml"))
    >>> fetch = cache.cached(api.get_course_catalog, "course_catalog", ttl_seconds=300)
    >>> courses = await fetch()
"""

import logging

__version__ = "0.1.0"

from lms_cache.caching.keys import generate_key
from lms_cache.caching.stats import CacheStats
from lms_cache.config.loader import load_config
from lms_cache.config.models import CacheSettings
from lms_cache.observability.version_gate import CACHE_SCHEMA_VERSION
from lms_cache.service.cache_service import CacheService, create_cache_service
from lms_cache.service.events import CacheEvent, CacheEventKind


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for LMS Cache.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import lms_cache
        >>> lms_cache.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("lms_cache").setLevel(level)


__all__ = [
    "CACHE_SCHEMA_VERSION",
    "CacheEvent",
    "CacheEventKind",
    "CacheService",
    "CacheSettings",
    "CacheStats",
    "configure_logging",
    "create_cache_service",
    "generate_key",
    "load_config",
]
