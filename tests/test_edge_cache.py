"""Unit tests for the key-value backed EdgeCache."""

import logging
from unittest.mock import Mock

import pytest

from meeting_edge.adapters.kv.in_memory import InMemoryKeyValueStore
from meeting_edge.core.errors import StoreAppError
from meeting_edge.utils.edge_cache import CachedResponse, EdgeCache, build_cache_key

URL = "http://testserver/?group_id=g1&token=abc123xyz"


class _BrokenStore(InMemoryKeyValueStore):
    async def get(self, key: str):
        raise StoreAppError(code="store_unavailable", message="down")

    async def put(self, key: str, value: str, *, ttl_seconds=None) -> None:
        raise StoreAppError(code="store_unavailable", message="down")


def _response(body: str = "<html>Standup</html>") -> CachedResponse:
    return CachedResponse(status_code=200, body=body, headers={"Cache-Control": "s-maxage=60"})


def test_build_cache_key_is_stable_and_sensitive_to_changes() -> None:
    key1 = build_cache_key("GET", URL)
    key2 = build_cache_key("get", URL)
    key3 = build_cache_key("GET", URL.replace("abc123xyz", "other"))
    key4 = build_cache_key("HEAD", URL)

    assert key1 == key2
    assert key1 != key3
    assert key1 != key4
    assert key1.startswith("edge_cache_")


@pytest.mark.asyncio
async def test_store_then_lookup_returns_response() -> None:
    cache = EdgeCache(InMemoryKeyValueStore())

    assert await cache.lookup("GET", URL) is None

    await cache.store("GET", URL, _response())

    assert await cache.lookup("GET", URL) == _response()
    assert await cache.lookup("HEAD", URL) is None


@pytest.mark.asyncio
async def test_entry_expires_after_ttl() -> None:
    clock = Mock(return_value=1000.0)
    cache = EdgeCache(InMemoryKeyValueStore(clock=clock), ttl_seconds=60)
    await cache.store("GET", URL, _response())

    clock.return_value = 1059.0
    assert await cache.lookup("GET", URL) is not None

    clock.return_value = 1060.0
    assert await cache.lookup("GET", URL) is None


@pytest.mark.asyncio
async def test_explicit_ttl_overrides_default() -> None:
    clock = Mock(return_value=1000.0)
    cache = EdgeCache(InMemoryKeyValueStore(clock=clock), ttl_seconds=60)
    await cache.store("GET", URL, _response(), ttl_seconds=5)

    clock.return_value = 1005.0
    assert await cache.lookup("GET", URL) is None


@pytest.mark.asyncio
async def test_lookup_failure_counts_as_miss() -> None:
    cache = EdgeCache(_BrokenStore())
    assert await cache.lookup("GET", URL) is None


@pytest.mark.asyncio
async def test_corrupt_entry_counts_as_miss() -> None:
    store = InMemoryKeyValueStore()
    cache = EdgeCache(store)
    await store.put(build_cache_key("GET", URL), "not json", ttl_seconds=60)

    assert await cache.lookup("GET", URL) is None


@pytest.mark.asyncio
async def test_store_failure_raises() -> None:
    cache = EdgeCache(_BrokenStore())
    with pytest.raises(StoreAppError):
        await cache.store("GET", URL, _response())


@pytest.mark.asyncio
async def test_background_store_swallows_and_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    cache = EdgeCache(_BrokenStore())

    with caplog.at_level(logging.WARNING, logger="meeting_edge.utils.edge_cache"):
        await cache.store_in_background("GET", URL, _response())

    assert any(r.getMessage() == "edge_cache.populate_failed" for r in caplog.records)


def test_invalid_ttl() -> None:
    with pytest.raises(ValueError):
        EdgeCache(InMemoryKeyValueStore(), ttl_seconds=0)


def test_cached_response_json_round_trip() -> None:
    original = _response()
    assert CachedResponse.from_json(original.to_json()) == original
