"""
Domain Entities - Cache Entry and Persisted Record Shape.

A CacheEntry is the unit stored in every tier. Durable tiers hold the
entry as compact JSON text shaped as:

    {"data": ..., "createdAt": ..., "ttl": ..., "expiresAt": ...}

Design Notes:
    - Payload type is supplied by the call site (Generic[T])
    - The core only inspects payloads to measure serialized size
    - Timestamps are epoch seconds
"""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar

T = TypeVar("T")

RECORD_FIELDS = ("data", "createdAt", "ttl", "expiresAt")


@dataclass
class CacheEntry(Generic[T]):
    """A cached payload with its write time and lifetime."""

    key: str
    data: T
    created_at: float
    ttl: float
    expires_at: float

    @classmethod
    def create(cls, key: str, data: T, ttl: float, now: float) -> "CacheEntry[T]":
        """Build an entry whose expiry is derived from ttl."""
        return cls(
            key=key,
            data=data,
            created_at=now,
            ttl=ttl,
            expires_at=now + ttl,
        )

    def is_valid(self, now: float) -> bool:
        """An entry is valid strictly before its expiry time."""
        return now < self.expires_at

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted record layout."""
        return {
            "data": self.data,
            "createdAt": self.created_at,
            "ttl": self.ttl,
            "expiresAt": self.expires_at,
        }

    def serialize(self) -> str:
        """
        Encode the entry as compact JSON.

        Raises:
            TypeError, ValueError: If the payload is not JSON-serializable
        """
        return json.dumps(self.to_record(), separators=(",", ":"), allow_nan=False)

    @classmethod
    def from_record(cls, key: str, record: Any) -> "CacheEntry[Any]":
        """
        Rebuild an entry from a persisted record.

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(record, dict):
            raise ValueError(f"record for {key} is not an object")
        missing = [name for name in RECORD_FIELDS if name not in record]
        if missing:
            raise ValueError(f"record for {key} missing fields: {missing}")
        for name in ("createdAt", "ttl", "expiresAt"):
            value = record[name]
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"record for {key} has non-numeric {name}")
        return cls(
            key=key,
            data=record["data"],
            created_at=float(record["createdAt"]),
            ttl=float(record["ttl"]),
            expires_at=float(record["expiresAt"]),
        )

    @classmethod
    def deserialize(cls, key: str, raw: Any) -> "CacheEntry[Any]":
        """
        Parse raw stored text back into an entry.

        Raises:
            ValueError: If the text is not a valid record
        """
        if not isinstance(raw, (str, bytes)):
            raise ValueError(f"record for {key} is not text")
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"record for {key} is not valid JSON: {e}") from e
        return cls.from_record(key, record)


def size_in_bytes(text: str) -> int:
    """UTF-8 length of stored text."""
    return len(text.encode("utf-8"))


def read_created_at(raw: Any) -> float:
    """
    Extract createdAt from raw record text without building an entry.

    Raises:
        ValueError: If the record cannot be parsed
    """
    return CacheEntry.deserialize("", raw).created_at
