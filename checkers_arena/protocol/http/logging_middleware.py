from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"


def game_id_of(request: Request) -> Optional[str]:
    """Session id from the matched `/api/games/{game_id}/...` route, if any.

    Path params are filled in by the router, so this is only set after routing.
    """
    return request.path_params.get("game_id")


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log one event per handled request.

    The event carries the game the request touched, so a session's moves can be
    followed through the log. Server errors are logged at warning level.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "game_id": game_id_of(request),
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return response
