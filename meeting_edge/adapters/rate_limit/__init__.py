"""Rate limiting adapters.

Counters are kept in the shared key-value store so that every instance of
the service enforces the same per-client budget.
"""
