from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check for load balancers.

    Exempt from rate limiting and never touches the key-value store, so it
    stays green while the store is degraded.

    Returns:
        dict: ``status`` set to "ok" and the configured store backend.
    """

    return {"status": "ok", "store_backend": request.app.state.settings.store.backend}
