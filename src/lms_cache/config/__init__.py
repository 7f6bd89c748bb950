"""
Configuration Package - Models and Loaders.

    - Pydantic models for type-safe cache settings
    - YAML loader with validation and profile overlays
"""

from lms_cache.config.loader import ConfigLoader, load_config
from lms_cache.config.models import (
    CacheSettings,
    LargeItemTierConfig,
    MemoryTierConfig,
    PersistentTierConfig,
)

__all__ = [
    "CacheSettings",
    "ConfigLoader",
    "LargeItemTierConfig",
    "MemoryTierConfig",
    "PersistentTierConfig",
    "load_config",
]
