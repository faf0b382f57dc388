"""Factory for creating the configured key-value store.

Keeps backend selection in one place so the app factory only deals with
the abstract interface.
"""

from __future__ import annotations

import logging

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.adapters.kv.in_memory import InMemoryKeyValueStore
from meeting_edge.adapters.kv.redis_store import RedisKeyValueStore
from meeting_edge.core.config import StoreSettings
from meeting_edge.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

_SUPPORTED_BACKENDS = ("memory", "redis")


def create_kv_store(store_settings: StoreSettings) -> AbstractKeyValueStore:
    """Build a key-value store from settings.

    Args:
        store_settings: Store binding configuration.

    Returns:
        AbstractKeyValueStore: Store instance for the configured backend.

    Raises:
        ValidationAppError: If the backend is not supported.
    """
    backend = store_settings.backend.lower()

    if backend == "memory":
        logger.info("kv.created", extra={"backend": backend})
        return InMemoryKeyValueStore()

    if backend == "redis":
        logger.info("kv.created", extra={"backend": backend})
        return RedisKeyValueStore(
            store_settings.redis_url,
            socket_timeout=store_settings.socket_timeout_seconds,
        )

    raise ValidationAppError(
        code="unsupported_store_backend",
        message=f"Unsupported key-value backend: '{store_settings.backend}'",
        details={
            "backend": store_settings.backend,
            "hint": f"Use one of: {', '.join(_SUPPORTED_BACKENDS)}",
        },
    )
