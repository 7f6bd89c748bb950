"""
Observability Package.

    - VersionGate: schema-version invalidation at startup
"""

from lms_cache.observability.version_gate import (
    CACHE_SCHEMA_VERSION,
    VERSION_RECORD_KEY,
    VersionGate,
)

__all__ = [
    "CACHE_SCHEMA_VERSION",
    "VERSION_RECORD_KEY",
    "VersionGate",
]
