"""Fixed-window rate limiter backed by the shared key-value store.

Notes:
- Counters live in the key-value store under
  ``rate_limit_{client}_{bucket}`` with ``bucket = floor(now / window)``,
  so every worker and instance shares the same budget.
- The read-increment-write is not atomic. Two concurrent requests in the
  same bucket can read the same count and both pass, so the limit is an
  approximate upper bound rather than an exact quota. Keep it that way:
  switching to an atomic counter changes behaviour under load.
"""

from __future__ import annotations

import math
import time
from typing import Callable

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from meeting_edge.core.errors import StoreAppError

RATE_LIMIT_KEY_PREFIX = "rate_limit"


def build_rate_limit_key(client: str, bucket: int) -> str:
    """Build the store key of the counter for client in bucket."""
    return f"{RATE_LIMIT_KEY_PREFIX}_{client}_{bucket}"


class KVFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per client in fixed time buckets.

    Each counter is written with a lifetime of one window so stale buckets
    disappear from the store on their own.
    """

    def __init__(
        self,
        store: AbstractKeyValueStore,
        *,
        limit: int,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            store: Key-value store holding the counters.
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock

    @property
    def limit(self) -> int:
        return self._limit

    def _get_bucket(self, now: float) -> tuple[int, int]:
        """Return (bucket_number, reset_at_epoch_seconds) for a timestamp."""
        bucket = int(now // self._window_seconds)
        reset_at = (bucket + 1) * self._window_seconds
        return bucket, reset_at

    async def _read_count(self, counter_key: str) -> int:
        raw = await self._store.get(counter_key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError as exc:
            raise StoreAppError(
                code="corrupt_rate_counter",
                message="Rate counter holds a non-integer value",
            ) from exc

    async def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided client.

        Reads the bucket counter (absent counts as zero); when the count has
        reached the limit the request is denied and nothing is written.
        Otherwise the incremented count is written back with a one-window
        lifetime.

        Args:
            key: Client identifier (usually the client address).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
            StoreAppError: If the counter cannot be read or written.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        bucket, reset_at = self._get_bucket(now)
        counter_key = build_rate_limit_key(key, bucket)

        count = await self._read_count(counter_key)

        if count + cost > self._limit:
            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=max(0, self._limit - count),
                reset_at=reset_at,
                retry_after_seconds=max(0, int(math.ceil(reset_at - now))),
            )

        count += cost
        await self._store.put(counter_key, str(count), ttl_seconds=self._window_seconds)
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_at=reset_at,
            retry_after_seconds=None,
        )
