"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from lms_cache.caching.keys import DEFAULT_KEY_PREFIX
from lms_cache.observability.version_gate import CACHE_SCHEMA_VERSION

DEFAULT_CACHE_ROOT = Path.home() / ".lms_cache"


class MemoryTierConfig(BaseModel):
    """Configuration for the volatile (in-process) tier."""

    # None or 0 means unbounded
    max_entries: Optional[int] = Field(default=None, ge=0)


class PersistentTierConfig(BaseModel):
    """Configuration for the bounded-durable tier."""

    directory: Path = Field(default_factory=lambda: DEFAULT_CACHE_ROOT / "persistent")
    # Budget that triggers eviction before a write
    capacity_bytes: int = Field(default=4_500_000, ge=1)
    # Hard ceiling; writes beyond it are rejected by the store
    quota_bytes: int = Field(default=5_000_000, ge=1)
    aggressive_eviction_ratio: float = Field(default=0.25, ge=0, le=1)

    @field_validator("directory")
    @classmethod
    def _expand_directory(cls, value: Path) -> Path:
        return value.expanduser()

    @model_validator(mode="after")
    def _quota_covers_capacity(self) -> "PersistentTierConfig":
        if self.quota_bytes < self.capacity_bytes:
            raise ValueError("quota_bytes must be >= capacity_bytes")
        return self


class LargeItemTierConfig(BaseModel):
    """Configuration for the large-item-durable tier."""

    enabled: bool = True
    directory: Path = Field(default_factory=lambda: DEFAULT_CACHE_ROOT / "large")
    # Serialized entries above this size skip the bounded tier
    threshold_bytes: int = Field(default=100_000, ge=1)

    @field_validator("directory")
    @classmethod
    def _expand_directory(cls, value: Path) -> Path:
        return value.expanduser()


class CacheSettings(BaseModel):
    """Root configuration object."""

    key_prefix: str = Field(default=DEFAULT_KEY_PREFIX, min_length=1)
    default_ttl_seconds: float = Field(default=4 * 60 * 60, gt=0)
    schema_version: str = CACHE_SCHEMA_VERSION
    purge_expired_on_start: bool = True
    log_access: bool = False
    memory: MemoryTierConfig = Field(default_factory=MemoryTierConfig)
    persistent: PersistentTierConfig = Field(default_factory=PersistentTierConfig)
    large: LargeItemTierConfig = Field(default_factory=LargeItemTierConfig)

    @field_validator("schema_version", mode="before")
    @classmethod
    def _version_as_text(cls, value: object) -> str:
        return str(value)

    @classmethod
    def in_directory(cls, root: Path, **overrides) -> "CacheSettings":
        """Settings with both durable tiers placed under root."""
        settings = cls(**overrides)
        settings.persistent.directory = Path(root) / "persistent"
        settings.large.directory = Path(root) / "large"
        return settings
