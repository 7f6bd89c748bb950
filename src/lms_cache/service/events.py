"""
Cache Events.

Clear operations publish events instead of touching any presentation
layer; a UI can subscribe and show its own notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CacheEventKind(Enum):
    CLEAR_ALL = "clear_all"
    CLEAR_BY_TYPE = "clear_by_type"
    VERSION_RESET = "version_reset"


@dataclass(frozen=True)
class CacheEvent:
    """Something happened that wiped cached data."""
    kind: CacheEventKind
    removed: int = 0
    type_label: Optional[str] = None

    @property
    def message(self) -> str:
        if self.kind is CacheEventKind.CLEAR_BY_TYPE:
            return f"{self.type_label} cache cleared! Data will be refreshed."
        if self.kind is CacheEventKind.VERSION_RESET:
            return "Cache format changed. Data will be refreshed."
        return "Cache cleared! Data will be refreshed."


CacheListener = Callable[[CacheEvent], None]


class EventEmitter:
    """Synchronous fan-out to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: List[CacheListener] = []

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Register listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: CacheListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: CacheEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Cache event listener failed on {event.kind.value}: {e}")
