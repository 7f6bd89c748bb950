"""
Service Package - Public Cache Facade.

    - CacheService: get/set, clears, memoizing wrapper, stats
    - create_cache_service: builds tiers from settings and starts the service
    - CacheEvent: clear notifications for subscribers
"""

from lms_cache.service.cache_service import CacheService, create_cache_service
from lms_cache.service.events import CacheEvent, CacheEventKind, EventEmitter

__all__ = [
    "CacheEvent",
    "CacheEventKind",
    "CacheService",
    "EventEmitter",
    "create_cache_service",
]
