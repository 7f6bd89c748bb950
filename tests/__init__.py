"""
Test Suite for LMS Cache.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: CacheService against real disk tiers
    - performance/: Timing checks (marked "performance")

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest -m "not performance"             # Skip timing checks
    pytest --cov=src/lms_cache              # With coverage
"""
