"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested with a fake clock and temporary directories.
Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_keys.py: Key generation and label recovery
    - test_tiered_store.py: Read/write paths across tiers
    - test_eviction.py: Oldest-write-first eviction
    - test_version_gate.py: Startup invalidation
    - test_config_loader.py: Configuration loading/validation
"""
