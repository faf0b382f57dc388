from __future__ import annotations

from meeting_edge.api.routes.health import router as health_router
from meeting_edge.api.routes.sessions import router as sessions_router

__all__ = ["health_router", "sessions_router"]
