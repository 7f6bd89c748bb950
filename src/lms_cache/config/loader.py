"""
Cache Settings Loader.

Reads tier sizes, TTLs and the schema version from a YAML file, optionally
overlays a deployment profile from ``config/profiles/<name>.yaml`` and
validates the result into ``CacheSettings``.

Overlay rules:
    - Nested tier sections (``memory``, ``persistent``, ``large``) merge
      key by key, so a profile can shrink one quota without restating the rest
    - Any other value in the profile replaces the base value outright
    - An empty file is an empty mapping and yields the defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from lms_cache.config.models import CacheSettings

PROFILES_DIR = Path("config") / "profiles"


def merge_overlay(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` with ``overlay`` applied; neither input is modified."""
    merged = dict(base)
    for name, value in overlay.items():
        current = merged.get(name)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[name] = merge_overlay(current, value)
        else:
            merged[name] = value
    return merged


class ConfigLoader:
    """Builds validated cache settings from a YAML file and a profile."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Args:
            base_path: Directory that relative settings paths and the
                profiles directory are resolved against
        """
        self._base_path = base_path or Path(".")

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
    ) -> CacheSettings:
        """
        Read cache settings, applying ``profile`` on top when given.

        Raises:
            FileNotFoundError: Settings file or profile is missing
            ValueError: A file holds something other than a mapping
            ValidationError: Tier sizes or TTLs fail validation
        """
        raw = self._read_mapping(self._resolve_path(config_path))

        if profile:
            raw = merge_overlay(raw, self._read_profile(profile))

        return CacheSettings.model_validate(raw)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> CacheSettings:
        """Validate already-parsed settings."""
        return CacheSettings.model_validate(config_dict)

    def _resolve_path(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self._base_path / p

    def _read_mapping(self, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise FileNotFoundError(f"Cache settings file not found: {path}")
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Cache settings in {path} must be a mapping of setting names, "
                f"got {type(data).__name__}"
            )
        return data

    def _read_profile(self, profile: str) -> Dict[str, Any]:
        profile_path = self._base_path / PROFILES_DIR / f"{profile}.yaml"
        if not profile_path.is_file():
            raise FileNotFoundError(
                f"Cache profile '{profile}' not found, expected {profile_path}"
            )
        return self._read_mapping(profile_path)


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> CacheSettings:
    """Load cache settings in one call; see ``ConfigLoader.load``."""
    return ConfigLoader(base_path=base_path).load(config_path, profile)
