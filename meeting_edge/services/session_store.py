"""Session record storage on top of the key-value store.

Records are schemaless JSON objects stored without expiry under
``{prefix}_{group_id}_{token}``. The key carries no collision detection:
writing a second record with the same (group_id, token) replaces the first.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.core.errors import SerializationAppError

logger = logging.getLogger(__name__)

SessionRecord = dict[str, Any]

DEFAULT_KEY_PREFIX = "zoomInfo"


class SessionStore:
    """Reads and writes session records.

    Attributes:
        key_prefix: Namespace prefix of every storage key.
    """

    def __init__(self, store: AbstractKeyValueStore, *, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self._store = store
        self.key_prefix = key_prefix

    def build_key(self, group_id: Any, token: str) -> str:
        """Compose the storage key of a (group_id, token) pair."""
        return f"{self.key_prefix}_{group_id}_{token}"

    async def put(self, key: str, record: SessionRecord) -> None:
        """Serialize record and store it under key with no expiry.

        Raises:
            SerializationAppError: If the record is not JSON-serializable.
            StoreAppError: If the store write fails.
        """
        try:
            payload = json.dumps(record)
        except (TypeError, ValueError) as exc:
            raise SerializationAppError(
                code="record_not_serializable",
                message="Session record could not be serialized",
            ) from exc

        await self._store.put(key, payload)
        logger.debug("session_store.put", extra={"size": len(payload)})

    async def get(self, key: str) -> SessionRecord | None:
        """Return the record stored under key, or None when absent.

        Raises:
            SerializationAppError: If the stored value is not a JSON object.
            StoreAppError: If the store read fails.
        """
        payload = await self._store.get(key)
        if payload is None:
            return None

        try:
            record = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise SerializationAppError(
                code="record_corrupt",
                message="Stored session record is not valid JSON",
            ) from exc

        if not isinstance(record, dict):
            raise SerializationAppError(
                code="record_corrupt",
                message="Stored session record is not a JSON object",
            )
        return record
