"""
Interfaces Layer - Abstract Protocols for Storage Tiers.

Protocols:
    - VolatileTier: In-process entry store
    - BoundedStore: Synchronous durable store with a hard quota
    - LargeItemBackend: Asynchronous durable store for big payloads

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Durable operations return Result variants, never raise
"""

from lms_cache.interfaces.storage import BoundedStore, LargeItemBackend, VolatileTier

__all__ = [
    "BoundedStore",
    "LargeItemBackend",
    "VolatileTier",
]
