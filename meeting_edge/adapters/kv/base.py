"""Key-value store interface.

Services depend on this abstraction (not the concrete implementation) so
the backing store can be swapped without touching request handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """String-to-string store with optional per-key lifetime.

    No locking or compare-and-set is exposed: callers that read, modify and
    write back a value accept that concurrent writers may overwrite each other.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent/expired.

        Raises:
            StoreAppError: If the store cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        """Store value under key, replacing any previous value.

        Args:
            key: Storage key.
            value: Serialized value.
            ttl_seconds: Lifetime in seconds; None keeps the value until overwritten.

        Raises:
            StoreAppError: If the store cannot be reached.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
