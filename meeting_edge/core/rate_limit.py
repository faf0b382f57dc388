"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Swap-friendly: the limiter is built once per app and stored on
  ``app.state``; tests can replace it or its key-value store.
- Explicit failure policy: when the counter store is unreachable the
  request is either allowed (fail open) or rejected (fail closed) per
  configuration.

Rate limiting strategy:
- Fixed one-minute buckets per client address.
- The address comes from the edge proxy header when present, otherwise the
  socket peer.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Request

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.adapters.rate_limit.base import AbstractRateLimiter
from meeting_edge.adapters.rate_limit.kv_fixed_window import KVFixedWindowRateLimiter
from meeting_edge.core.config import AppSettings
from meeting_edge.core.errors import RateLimitAppError, StoreAppError

logger = logging.getLogger(__name__)


def create_rate_limiter(
    app_settings: AppSettings, store: AbstractKeyValueStore
) -> AbstractRateLimiter:
    """Build the rate limiter configured for this app."""
    return KVFixedWindowRateLimiter(
        store,
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
    )


def get_client_address(request: Request, header_name: str | None = None) -> str:
    """Resolve the calling client's address.

    The header is only consulted when one is configured: clients can send
    any value, so it is trusted only behind a proxy that overwrites it.

    Args:
        request: FastAPI request.
        header_name: Header set by a trusted edge proxy with the original
            address, or None to use the socket peer.

    Returns:
        str: Client address, or "unknown" when it cannot be determined.
    """

    if header_name:
        forwarded = request.headers.get(header_name, "").strip()
        if forwarded:
            return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _hash_client(client: str) -> str:
    """Hash the client address for logging without exposing it."""
    return hashlib.sha256(client.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing rate limits.

    When enabled, consumes 1 unit from the caller's budget for the current
    bucket. If the caller has exhausted the budget, raises RateLimitAppError
    (mapped to HTTP 429).

    Args:
        request: FastAPI request.

    Raises:
        RateLimitAppError: When the rate limit is exceeded, or when the store
            fails and the limiter is configured to fail closed.
    """

    app_settings: AppSettings = request.app.state.settings.app
    if not app_settings.rate_limit_enabled:
        return

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    client = get_client_address(request, app_settings.client_ip_header)
    client_hash = _hash_client(client)

    try:
        result = await limiter.consume(client)
    except StoreAppError as exc:
        if app_settings.rate_limit_fail_open:
            logger.warning(
                "rate_limit.store_failed",
                extra={"client_hash": client_hash, "policy": "fail_open", "error_code": exc.code},
            )
            return
        logger.error(
            "rate_limit.store_failed",
            extra={"client_hash": client_hash, "policy": "fail_closed", "error_code": exc.code},
        )
        raise RateLimitAppError(
            code="rate_limit_unavailable",
            message="Rate limit could not be verified. Try again later.",
        ) from exc

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": client_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": app_settings.rate_limit_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": client_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": app_settings.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    details = None
    if app_settings.rate_limit_include_headers:
        details = {
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        }

    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded. Try again later.",
        details=details,
    )
