"""In-memory key-value store.

Notes:
- Per-process only: several workers each see their own data, so use it for
  tests and single-process development, not behind a load balancer.
- Expiry is lazy: expired entries are dropped when read or listed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from meeting_edge.adapters.kv.base import AbstractKeyValueStore


@dataclass
class _Entry:
    value: str
    expires_at: float | None


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dict-backed store honouring per-key lifetimes."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def _is_expired(self, entry: _Entry) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            self._entries.pop(key, None)
            return None
        return entry.value

    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None and ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def keys(self, prefix: str = "") -> list[str]:
        """List live keys starting with prefix."""
        live = []
        for key, entry in list(self._entries.items()):
            if self._is_expired(entry):
                self._entries.pop(key, None)
                continue
            if key.startswith(prefix):
                live.append(key)
        return sorted(live)
