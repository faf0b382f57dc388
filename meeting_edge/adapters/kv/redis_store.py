"""Redis-backed key-value store.

Shared by every worker and instance, which makes it the production
substrate for session records, rate counters and edge cache entries.
Lifetimes map to ``SET key value EX ttl``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import redis
import redis.asyncio as aioredis

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.core.errors import StoreAppError

logger = logging.getLogger(__name__)


class RedisKeyValueStore(AbstractKeyValueStore):
    """Key-value store on top of an asyncio Redis client.

    Args:
        redis_url: Redis connection URL (e.g. redis://localhost:6379/0).
        socket_timeout: Socket timeout in seconds for every command.
        _redis_client: Pre-built client (tests inject fakeredis here).
    """

    def __init__(
        self,
        redis_url: str,
        *,
        socket_timeout: float | None = 5.0,
        _redis_client: Optional[Any] = None,
    ) -> None:
        if _redis_client is not None:
            self._client = _redis_client
        else:
            self._client = aioredis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=socket_timeout,
            )

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except redis.RedisError as exc:
            logger.warning(
                "kv.get_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            raise StoreAppError(
                code="store_unavailable",
                message="Key-value store read failed",
                details={"backend": "redis"},
            ) from exc

    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            logger.warning(
                "kv.put_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            raise StoreAppError(
                code="store_unavailable",
                message="Key-value store write failed",
                details={"backend": "redis"},
            ) from exc

    async def close(self) -> None:
        await self._client.aclose()
