from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, cast

from fastapi import Request
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette import status
from fastapi.exceptions import RequestValidationError

from .logging_middleware import game_id_of
from ...engine.errors import IllegalMoveRequested, InvalidStateError


logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """Body of every error response, nested under the ``error`` key.

    ``game_id`` is set when the failing route names a game session.
    """

    code: str
    message: str
    type: str
    request_id: str
    game_id: Optional[str] = None
    field_errors: Optional[List[Dict[str, str]]] = None


def error_envelope(
    request: Request, status_code: int, code: str, message: str, **extra: Any
) -> Dict[str, Any]:
    body = ErrorBody(
        code=code,
        message=message,
        type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=getattr(request.state, "request_id", ""),
        game_id=game_id_of(request),
        **extra,
    )
    return {"error": body.model_dump(exclude_none=True)}


def _render(request: Request, status_code: int, code: str, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(request, status_code, code, message, **extra),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _render(request, exc.status_code, _status_to_code(exc.status_code), detail)
    return await exception_handler(request, exc)


async def engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Engine errors are caller mistakes: a bad move, a bad diagram, a broken position.
    if isinstance(exc, IllegalMoveRequested):
        code = "illegal_move"
    elif isinstance(exc, InvalidStateError):
        code = "invalid_state"
    else:
        code = "bad_request"
    logger.info(
        "engine error",
        extra={
            "request_id": getattr(request.state, "request_id", ""),
            "game_id": game_id_of(request),
            "code": code,
        },
    )
    return _render(request, status.HTTP_400_BAD_REQUEST, code, str(exc))


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, FastAPIHTTPException):
        return await http_exception_handler(request, exc)
    logger.exception(
        "Unhandled exception",
        extra={"request_id": getattr(request.state, "request_id", ""), "game_id": game_id_of(request)},
    )
    return _render(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal Server Error"
    )


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    rve = cast(RequestValidationError, exc)
    field_errors = [
        {
            "field": ".".join(str(p) for p in e.get("loc", []) if p is not None),
            "code": e.get("type", "value_error"),
            "message": e.get("msg", "invalid value"),
        }
        for e in rve.errors()
    ]
    return _render(
        request, 422, "unprocessable_entity", "Validation error", field_errors=field_errors or None
    )


def _status_to_code(status_code: int) -> str:
    codes = {
        status.HTTP_400_BAD_REQUEST: "bad_request",
        status.HTTP_404_NOT_FOUND: "not_found",
        status.HTTP_409_CONFLICT: "conflict",
        422: "unprocessable_entity",
    }
    if status_code in codes:
        return codes[status_code]
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
