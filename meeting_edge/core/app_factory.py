from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (configuration, store binding, middleware,
handlers, routers) so tests can build an app around their own settings and
an in-memory store.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from meeting_edge.adapters.kv.base import AbstractKeyValueStore
from meeting_edge.adapters.kv.factory import create_kv_store
from meeting_edge.api.routes import health_router, sessions_router
from meeting_edge.core.config import Settings, settings as default_settings
from meeting_edge.core.exception_handlers import setup_exception_handlers
from meeting_edge.core.logging import configure_logging
from meeting_edge.core.middleware import request_id_middleware
from meeting_edge.core.openapi import apply_openapi_customizations
from meeting_edge.core.rate_limit import create_rate_limiter
from meeting_edge.services.renderer import PageRenderer
from meeting_edge.services.request_handler import SessionRequestHandler
from meeting_edge.services.session_store import SessionStore
from meeting_edge.services.token_generator import create_token_generator
from meeting_edge.utils.edge_cache import EdgeCache

logger = logging.getLogger(__name__)


def build_session_handler(
    app_settings, kv_store: AbstractKeyValueStore
) -> SessionRequestHandler:
    """Assemble the request handler and its collaborators around one store."""
    return SessionRequestHandler(
        app_settings=app_settings,
        sessions=SessionStore(kv_store, key_prefix=app_settings.session_key_prefix),
        cache=EdgeCache(kv_store, ttl_seconds=app_settings.edge_cache_ttl_seconds),
        renderer=PageRenderer(
            analytics_tag_id=app_settings.analytics_tag_id,
            brand_name=app_settings.brand_name,
        ),
        tokens=create_token_generator(
            app_settings.token_generator, app_settings.token_length
        ),
    )


def create_app(
    settings: Settings | None = None,
    kv_store: AbstractKeyValueStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Configuration; defaults to the environment-loaded settings.
        kv_store: Key-value store binding; defaults to the configured backend.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    store = kv_store or create_kv_store(cfg.store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await store.close()
        logger.info("kv.closed", extra={"backend": cfg.store.backend})

    app = FastAPI(
        title="Meeting Session Edge",
        description=(
            "Publishes short-lived meeting session records (topic, start time, "
            "duration, join link) under a group id and an access token, and "
            "serves them as HTML pages. Writes require an API key; every "
            "request is rate limited per client address and reads are cached "
            "for 60 seconds."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.kv_store = store
    app.state.rate_limiter = create_rate_limiter(cfg.app, store)
    app.state.session_handler = build_session_handler(cfg.app, store)

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers: health before the catch-all session route
    app.include_router(health_router)
    app.include_router(sessions_router)

    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": cfg.app_env,
            "store_backend": cfg.store.backend,
            "rate_limit_requests": cfg.app.rate_limit_requests,
            "token_generator": cfg.app.token_generator,
        },
    )
    return app
