"""API key authorization for the write path.

Publishing a session requires an ``api_key`` query parameter that exactly
matches one of the configured secrets (comma-separated, which allows key
rotation). Reads are intentionally unauthenticated: possession of the
(group_id, token) pair is the only access control on them.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from meeting_edge.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Args:
        keys_string: Comma-separated string of API keys, or None.

    Returns:
        Set of trimmed, non-empty API keys.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ") == {"key1", "key2", "key3"}
        True
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def _hash_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def validate_api_key(provided_key: str | None, configured_keys: str | None) -> None:
    """Validate that the provided API key matches a configured secret.

    Pure validation logic without FastAPI dependencies for easy testing.
    Comparison is constant-time and exact (no trimming of the provided key).

    Args:
        provided_key: Value of the ``api_key`` query parameter, if any.
        configured_keys: Comma-separated configured secrets.

    Raises:
        AuthenticationAppError: If the key is missing or wrong, or no secret
            is configured (writes are then always rejected).
    """
    valid_keys = parse_api_keys(configured_keys)

    if not valid_keys:
        logger.error(
            "auth.failed",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="Unauthorized",
            details={"hint": "Set APP_API_KEYS to enable publishing"},
        )

    if not provided_key:
        logger.warning(
            "auth.failed",
            extra={"reason": "missing_api_key"},
        )
        raise AuthenticationAppError(
            code="missing_api_key",
            message="Unauthorized",
        )

    matched = False
    for valid_key in valid_keys:
        # Evaluate every key so timing does not reveal which one matched
        if hmac.compare_digest(provided_key.encode(), valid_key.encode()):
            matched = True

    if not matched:
        logger.warning(
            "auth.failed",
            extra={
                "reason": "invalid_api_key",
                "api_key_hash": _hash_key(provided_key),
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Unauthorized",
        )

    logger.debug("auth.success", extra={"api_key_hash": _hash_key(provided_key)})
