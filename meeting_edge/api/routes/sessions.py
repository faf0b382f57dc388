from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from meeting_edge.core.rate_limit import enforce_rate_limit
from meeting_edge.services.request_handler import SessionRequestHandler

router = APIRouter(tags=["Sessions"])

SESSION_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route(
    "/{path:path}",
    methods=SESSION_METHODS,
    dependencies=[Depends(enforce_rate_limit)],
    include_in_schema=False,
)
async def handle_session_request(
    request: Request,
    background_tasks: BackgroundTasks,
) -> Response:
    """Catch-all session endpoint.

    The path is ignored: requests are classified by method and query
    parameters only.

    - ``POST|PUT ?api_key=...`` with a JSON body containing ``group_id``
      publishes a session and returns ``{"message", "token"}``.
    - ``?group_id=...&token=...`` returns the session page (or the generic
      page when no such session exists).
    - Anything else returns the landing page.

    All requests are rate limited per client address (HTTP 429).
    """
    handler: SessionRequestHandler = request.app.state.session_handler
    return await handler.handle(request, background_tasks)
