"""
Fallback API

- Catch-all route: any method/path no other route matched answers 404
- Terminal error handlers: every error becomes {"status": ..., "message": ...}

The router must be included after every other router, since Starlette matches
routes in registration order.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from ..core.errors import AppError, RouteNotFoundError, error_response, resolve_error

router = APIRouter()
logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def original_url(request: Request) -> str:
    """Path plus query string, as the client sent it (still percent-encoded)."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


@router.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
async def route_not_found(request: Request, full_path: str) -> None:
    raise RouteNotFoundError(original_url(request))


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    status_code, _, message = resolve_error(exc)
    if status_code >= 500:
        logger.error(f"request_failed message={message}", extra={"path": request.url.path, "status_code": status_code})
    else:
        logger.info(f"request_rejected message={message}", extra={"path": request.url.path, "status_code": status_code})
    return error_response(exc)


def install_error_handlers(app: FastAPI) -> None:
    # Exception lands in ServerErrorMiddleware, outside every other stage,
    # so 500s rendered there carry no CORS headers
    for exc_class in (AppError, StarletteHTTPException, RequestValidationError, Exception):
        app.add_exception_handler(exc_class, handle_error)
