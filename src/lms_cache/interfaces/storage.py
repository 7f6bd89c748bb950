"""
Storage Protocols.

Defines the abstract interfaces for the three cache tiers. The tiered
store depends on these protocols, not on concrete backends.

Tiers:
    - VolatileTier: Process memory, holds CacheEntry objects
    - BoundedStore: Durable, synchronous, strict capacity ceiling
    - LargeItemBackend: Durable, asynchronous, larger capacity

Design Notes:
    - Durable tiers store raw record text keyed by cache key
    - Durable operations return Result variants instead of raising
    - Key enumeration is filtered by prefix so reserved keys stay hidden
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any, Callable, Iterable, List, Optional, Tuple

    from lms_cache.domain.entities import CacheEntry
    from lms_cache.resilience.result import Result


@runtime_checkable
class VolatileTier(Protocol):
    """In-process tier holding parsed entries."""

    def get(self, key: str) -> Optional[CacheEntry[Any]]:
        ...

    def put(self, entry: CacheEntry[Any]) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def clear(self) -> int:
        ...

    def keys(self) -> List[str]:
        ...

    def __len__(self) -> int:
        ...


@runtime_checkable
class BoundedStore(Protocol):
    """Synchronous durable tier with a hard byte quota."""

    @property
    def available(self) -> bool:
        ...

    def get_raw(self, key: str) -> Result[str]:
        """Raw record text; success with None when absent."""
        ...

    def put_raw(self, key: str, raw: str) -> Result[None]:
        """Store raw text; fails with QUOTA_EXCEEDED past the ceiling."""
        ...

    def delete(self, key: str) -> Result[bool]:
        ...

    def keys(self, prefix: str) -> Result[List[str]]:
        ...

    def items(self, prefix: str) -> Result[List[Tuple[str, Any]]]:
        ...

    def clear(self, prefix: str) -> Result[int]:
        ...

    def footprint(self, key: str, raw: str) -> int:
        """Bytes a record occupies against the quota."""
        ...

    def stored_bytes(self, key: str) -> int:
        """Footprint of the record currently stored under key (0 if none)."""
        ...

    def used_bytes(self) -> int:
        ...

    def count(self, prefix: str) -> int:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class LargeItemBackend(Protocol):
    """Asynchronous durable tier for payloads above the size threshold."""

    @property
    def available(self) -> bool:
        ...

    @property
    def connected(self) -> bool:
        ...

    def schedule_clear(
        self, prefix: str, key_filter: Optional[Callable[[str], bool]] = None
    ) -> None:
        """Clear matching keys as soon as the connection opens."""
        ...

    def schedule_delete(self, key: str) -> None:
        """Delete key as soon as the connection opens."""
        ...

    async def get_raw(self, key: str) -> Result[str]:
        ...

    async def put_raw(self, key: str, raw: str) -> Result[None]:
        ...

    async def delete(self, key: str) -> Result[bool]:
        ...

    async def keys(self, prefix: str) -> Result[List[str]]:
        ...

    async def clear(
        self, prefix: str, key_filter: Optional[Callable[[str], bool]] = None
    ) -> Result[int]:
        ...

    async def count(self, prefix: str) -> int:
        ...

    async def close(self) -> None:
        ...


def matching(keys: Iterable[Any], prefix: str) -> List[str]:
    """Keep string keys that start with prefix."""
    return [k for k in keys if isinstance(k, str) and k.startswith(prefix)]
