"""
Result Types - Explicit Error Variants for Storage Operations.

Backends never raise into the cache core. Each operation returns a
Result carrying either a value or a CacheError, and the tiered store
decides how to degrade based on the error kind.

Error Kinds:
    - PLATFORM_UNAVAILABLE: Backing storage could not be opened
    - QUOTA_EXCEEDED: Durable write rejected by the capacity ceiling
    - DESERIALIZATION_FAILURE: Stored record could not be parsed
    - SERIALIZATION_FAILURE: Payload could not be encoded for storage
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class CacheErrorKind(Enum):
    """Failure categories recognised by the cache core."""
    PLATFORM_UNAVAILABLE = "platform_unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    DESERIALIZATION_FAILURE = "deserialization_failure"
    SERIALIZATION_FAILURE = "serialization_failure"


@dataclass(frozen=True)
class CacheError:
    """A single storage failure."""
    kind: CacheErrorKind
    message: str
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a storage operation: a value or an error, never both."""
    value: Optional[T] = None
    error: Optional[CacheError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: CacheErrorKind,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> "Result[T]":
        return cls(error=CacheError(kind=kind, message=message, cause=cause))

    @property
    def ok(self) -> bool:
        """True when the operation succeeded."""
        return self.error is None

    def is_error(self, kind: CacheErrorKind) -> bool:
        """Check whether this result failed with the given kind."""
        return self.error is not None and self.error.kind is kind

    def unwrap_or(self, default: T) -> T:
        """Return the value, or default on failure or empty success."""
        if self.error is not None or self.value is None:
            return default
        return self.value
