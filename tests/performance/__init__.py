"""
Performance Tests.

Timing checks for the tiered store:
    - Memory hits well under a millisecond each
    - Writes under eviction pressure stay bounded
"""
