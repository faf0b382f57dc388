"""Key-value store adapters.

Every piece of state shared between requests (session records, rate
counters, edge cache entries) lives behind ``AbstractKeyValueStore`` so the
handler can run against Redis in production and an in-memory dict in tests.
"""
