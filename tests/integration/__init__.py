"""
Integration Tests - Service-Level Tests.

These tests build a CacheService from settings, with both durable
tiers in a temporary directory, and drive it through restarts,
version bumps and clears.

Test Files:
    - test_cache_service.py: Restart, version gate, clears, memoized calls
"""
