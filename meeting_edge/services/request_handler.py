"""Dispatch of inbound requests to the write, read or default path.

The rate limit has already been enforced by the route dependency when
``SessionRequestHandler.handle`` runs. From there:

- write verbs (POST, PUT) publish a new session record,
- requests carrying both ``group_id`` and ``token`` query parameters read one,
- everything else gets the landing page.

Errors are raised as AppError subclasses and mapped to status codes by the
global exception handlers; there are no retries at this layer.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import BackgroundTasks, Request, Response
from fastapi.responses import HTMLResponse

from meeting_edge.core.auth import validate_api_key
from meeting_edge.core.config import AppSettings
from meeting_edge.core.errors import SerializationAppError, ValidationAppError
from meeting_edge.schemas.sessions import PublishSessionResponse
from meeting_edge.services.renderer import PageRenderer
from meeting_edge.services.session_store import SessionRecord, SessionStore
from meeting_edge.services.token_generator import TokenGenerator
from meeting_edge.utils.edge_cache import CachedResponse, EdgeCache

logger = logging.getLogger(__name__)

WRITE_METHODS = frozenset({"POST", "PUT"})

PUBLISH_MESSAGE = "Meeting info updated successfully"


class SessionRequestHandler:
    """Request state machine for publishing and serving session records.

    Args:
        app_settings: Request handling configuration (secrets, cache TTL).
        sessions: Session record storage.
        cache: Edge cache for rendered read responses.
        renderer: HTML page renderer.
        tokens: Source of new session tokens.
    """

    def __init__(
        self,
        *,
        app_settings: AppSettings,
        sessions: SessionStore,
        cache: EdgeCache,
        renderer: PageRenderer,
        tokens: TokenGenerator,
    ) -> None:
        self._settings = app_settings
        self._sessions = sessions
        self._cache = cache
        self._renderer = renderer
        self._tokens = tokens

    async def handle(self, request: Request, background_tasks: BackgroundTasks) -> Response:
        """Route one request to its path and return the terminal response."""
        if request.method.upper() in WRITE_METHODS:
            publish = await self.publish(request)
            return Response(
                content=publish.model_dump_json(),
                media_type="application/json",
            )

        group_id = request.query_params.get("group_id")
        token = request.query_params.get("token")
        if group_id and token:
            return await self.read(request, group_id, token, background_tasks)

        return HTMLResponse(self._renderer.render_generic())

    async def _read_body(self, request: Request) -> Any:
        body = await request.body()
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SerializationAppError(
                code="malformed_body",
                message="Failed to update meeting info",
            ) from exc

    async def publish(self, request: Request) -> PublishSessionResponse:
        """Write path: authorize, validate and store a new session record.

        Raises:
            AuthenticationAppError: api_key does not match a configured secret.
            ValidationAppError: body has no group_id, or one that is not a
                string or integer.
            SerializationAppError: body is not valid JSON.
            StoreAppError: the record could not be written.
        """
        validate_api_key(request.query_params.get("api_key"), self._settings.api_keys)

        record = await self._read_body(request)
        group_id = record.get("group_id") if isinstance(record, dict) else None
        if not group_id:
            raise ValidationAppError(
                code="missing_group_id",
                message="group_id is missing in the request body",
                details={"field": "group_id"},
            )
        # Reads match on the query string text; only values whose str() is
        # that text can be read back.
        if isinstance(group_id, bool) or not isinstance(group_id, (str, int)):
            raise ValidationAppError(
                code="invalid_group_id",
                message="group_id must be a string or an integer",
                details={"field": "group_id", "type": type(group_id).__name__},
            )

        token = self._tokens.generate()
        record["token"] = token
        key = self._sessions.build_key(group_id, token)
        await self._sessions.put(key, record)

        logger.info(
            "session.published",
            extra={"group_id": str(group_id), "fields": sorted(record.keys())},
        )
        return PublishSessionResponse(message=PUBLISH_MESSAGE, token=token)

    def _read_headers(self) -> dict[str, str]:
        return {"Cache-Control": f"s-maxage={self._settings.edge_cache_ttl_seconds}"}

    def _miss_headers(self, headers: dict[str, str]) -> dict[str, str]:
        if not self._settings.edge_cache_enabled:
            return headers
        return {**headers, "X-Edge-Cache": "MISS"}

    async def read(
        self,
        request: Request,
        group_id: str,
        token: str,
        background_tasks: BackgroundTasks,
    ) -> Response:
        """Read path: serve from the edge cache, else from the session store.

        A missing record is a normal outcome rendered as the generic page.
        """
        method = request.method.upper()
        url = str(request.url)
        cache_enabled = self._settings.edge_cache_enabled

        if cache_enabled:
            cached = await self._cache.lookup(method, url)
            if cached is not None:
                return HTMLResponse(
                    content=cached.body,
                    status_code=cached.status_code,
                    headers={**cached.headers, "X-Edge-Cache": "HIT"},
                    media_type=cached.media_type,
                )

        key = self._sessions.build_key(group_id, token)
        record: SessionRecord | None = await self._sessions.get(key)
        headers = self._read_headers()

        if record is None:
            logger.info("session.not_found", extra={"group_id": group_id})
            return HTMLResponse(
                self._renderer.render_generic(),
                headers=self._miss_headers(headers),
            )

        body = self._renderer.render_session(record)
        if cache_enabled:
            background_tasks.add_task(
                self._cache.store_in_background,
                method,
                url,
                CachedResponse(status_code=200, body=body, headers=headers),
            )

        logger.info("session.served", extra={"group_id": group_id})
        return HTMLResponse(body, headers=self._miss_headers(headers))
