"""
Cached Producer - Memoizing Wrapper for Async Data Producers.

Wraps any producer (typically a call into the remote learning-management
API) so repeated calls with the same arguments are answered from the
tiered store until their TTL runs out.

Design Notes:
    - Decorator/Wrapper pattern
    - Key derived from the type label and the call's arguments
    - Full tiered read, including the large item tier
    - No in-flight deduplication: concurrent cold calls all hit the producer
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union

from lms_cache.caching.keys import generate_key, params_from_call

if TYPE_CHECKING:
    from lms_cache.caching.tiered_store import TieredStore

logger = logging.getLogger(__name__)

Producer = Callable[..., Union[Awaitable[Any], Any]]


class CachedProducer:
    """
    Caching wrapper around a producer function.

    Usage:
        fetch_users = CachedProducer(api.get_company_users, store, "company_users", 600)

        # First call: cache miss, calls the API
        users = await fetch_users(company_id=42)

        # Same arguments within 600s: cache hit
        users = await fetch_users(company_id=42)
    """

    def __init__(
        self,
        producer: Producer,
        store: TieredStore,
        type_label: str,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        """
        Initialize cached producer.

        Args:
            producer: Function to wrap; may return a value or an awaitable
            store: Tiered store holding the results
            type_label: Domain type of the produced data
            ttl_seconds: Lifetime of cached results (store default if None)
        """
        self.producer = producer
        self.store = store
        self.type_label = type_label
        self.ttl_seconds = ttl_seconds
        self.hits = 0
        self.misses = 0
        functools.update_wrapper(self, producer, updated=())

    def key_for(self, *args: Any, **kwargs: Any) -> str:
        """Cache key a call with these arguments maps to."""
        return generate_key(
            self.type_label,
            params_from_call(args, kwargs),
            prefix=self.store.prefix,
        )

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        cache_key = self.key_for(*args, **kwargs)

        entry = await self.store.get_entry_async(cache_key)
        if entry is not None:
            self.hits += 1
            return entry.data

        self.misses += 1
        logger.debug(f"Fetching fresh data: {self.type_label}")

        result = self.producer(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result

        self.store.set(cache_key, result, self.ttl_seconds)
        return result

    def stats(self) -> Dict[str, Any]:
        """Hit and miss counts for this wrapper."""
        total = self.hits + self.misses
        return {
            "type": self.type_label,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total > 0 else 0.0,
        }
