"""
Cache Key Generation.

Keys have the form f"{prefix}{type_label}_{hash}" where hash is a
base-36 rolling polynomial hash of the parameters serialized with
sorted keys. Logically identical parameter bags always produce the
same key, whatever order the caller built them in.

Example: "lms_cache_users_1x9kq2"
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

DEFAULT_KEY_PREFIX = "lms_cache_"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_key(
    type_label: str,
    params: Any,
    prefix: str = DEFAULT_KEY_PREFIX,
) -> str:
    """
    Create a cache key from a type label and a parameter bag.

    Args:
        type_label: Domain type of the cached data (e.g. "company_users")
        params: Mapping (or any JSON-like value) identifying the query
        prefix: Namespace prefix for all keys

    Returns:
        Cache key
    """
    return f"{prefix}{type_label}_{rolling_hash(canonical_params(params))}"


def canonical_params(params: Any) -> str:
    """Serialize params with keys sorted at every level."""
    return json.dumps(
        params,
        sort_keys=True,
        separators=(",", ":"),
        default=str,
        ensure_ascii=False,
    )


def rolling_hash(text: str) -> str:
    """
    Polynomial hash h = h * 31 + code point, wrapped to signed 32 bits.

    Returns the absolute value in base 36. Not a cryptographic digest;
    a collision can only serve a structurally similar wrong value.
    """
    h = 0
    for ch in text:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return to_base36(abs(h))


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def type_label_of(key: str, prefix: str = DEFAULT_KEY_PREFIX) -> Optional[str]:
    """Recover the type label a key was derived from, or None."""
    if not key.startswith(prefix):
        return None
    label, sep, digest = key[len(prefix):].rpartition("_")
    if not sep or not digest:
        return None
    return label


def params_from_call(args: tuple, kwargs: Mapping[str, Any]) -> dict:
    """Parameter bag for a wrapped producer call."""
    return {"args": list(args), "kwargs": dict(kwargs)}
