"""Read-through response cache in front of the session store.

Rendered read responses are kept in the shared key-value store for a short
lifetime, keyed by the full request (method + URL including the group_id
and token query parameters). Population happens after the response has been
sent and is best-effort: any failure is logged and dropped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from hashlib import sha256

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.core.errors import StoreAppError

logger = logging.getLogger(__name__)

EDGE_CACHE_KEY_PREFIX = "edge_cache"
DEFAULT_TTL_SECONDS = 60


@dataclass(frozen=True)
class CachedResponse:
    """Serializable snapshot of a rendered response."""

    status_code: int
    body: str
    media_type: str = "text/html"
    headers: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, payload: str) -> "CachedResponse":
        data = json.loads(payload)
        return cls(
            status_code=int(data["status_code"]),
            body=data["body"],
            media_type=data.get("media_type", "text/html"),
            headers=dict(data.get("headers") or {}),
        )


def build_cache_key(method: str, url: str) -> str:
    """Build a stable cache key from the request method and full URL.

    Args:
        method: HTTP method of the request.
        url: Full request URL, query string included.

    Returns:
        Prefixed hex-encoded SHA-256 digest.
    """

    hasher = sha256()
    hasher.update(method.upper().encode())
    hasher.update(b" ")
    hasher.update(url.encode())
    return f"{EDGE_CACHE_KEY_PREFIX}_{hasher.hexdigest()}"


class EdgeCache:
    """Cache-aside layer for rendered read responses.

    Attributes:
        ttl_seconds: Lifetime applied to entries stored without explicit ttl.
    """

    def __init__(self, store: AbstractKeyValueStore, *, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        self._store = store
        self.ttl_seconds = ttl_seconds

    async def lookup(self, method: str, url: str) -> CachedResponse | None:
        """Return the cached response for a request, or None on a miss.

        An unreachable store or an unreadable entry counts as a miss.
        """

        key = build_cache_key(method, url)
        try:
            payload = await self._store.get(key)
        except StoreAppError as exc:
            logger.warning(
                "edge_cache.lookup_failed",
                extra={"cache_key": key[:27], "error_code": exc.code},
            )
            return None

        if payload is None:
            logger.debug("edge_cache.miss", extra={"cache_key": key[:27]})
            return None

        try:
            cached = CachedResponse.from_json(payload)
        except (ValueError, KeyError, TypeError):
            logger.warning("edge_cache.entry_corrupt", extra={"cache_key": key[:27]})
            return None

        logger.debug("edge_cache.hit", extra={"cache_key": key[:27]})
        return cached

    async def store(
        self,
        method: str,
        url: str,
        response: CachedResponse,
        ttl_seconds: int | None = None,
    ) -> None:
        """Store a response for the request.

        Raises:
            StoreAppError: If the store write fails.
        """

        key = build_cache_key(method, url)
        ttl = ttl_seconds or self.ttl_seconds
        await self._store.put(key, response.to_json(), ttl_seconds=ttl)
        logger.debug("edge_cache.set", extra={"cache_key": key[:27], "ttl_s": ttl})

    async def store_in_background(
        self,
        method: str,
        url: str,
        response: CachedResponse,
        ttl_seconds: int | None = None,
    ) -> None:
        """Fire-and-forget variant of store() for background tasks.

        Runs after the response was sent, so errors are logged and swallowed.
        """

        try:
            await self.store(method, url, response, ttl_seconds)
        except Exception as exc:
            logger.warning(
                "edge_cache.populate_failed",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
