"""
Error kinds and their mapping to client responses.

Every failure that reaches a client is described by an ErrorKind carrying its HTTP
status code. resolve_error() is the single place that turns an exception into the
(status_code, status, message) triple rendered as {"status": ..., "message": ...}.
"""
from __future__ import annotations

import enum
from http import HTTPStatus
from typing import Optional, Tuple

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from ..models.api_models import ErrorResponse

DEFAULT_STATUS = "error"


class ErrorKind(enum.Enum):
    BAD_REQUEST = HTTPStatus.BAD_REQUEST
    NOT_FOUND = HTTPStatus.NOT_FOUND
    METHOD_NOT_ALLOWED = HTTPStatus.METHOD_NOT_ALLOWED
    PAYLOAD_TOO_LARGE = HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    UNSUPPORTED_MEDIA_TYPE = HTTPStatus.UNSUPPORTED_MEDIA_TYPE
    UNPROCESSABLE = HTTPStatus.UNPROCESSABLE_ENTITY
    INTERNAL = HTTPStatus.INTERNAL_SERVER_ERROR
    SERVICE_UNAVAILABLE = HTTPStatus.SERVICE_UNAVAILABLE

    @property
    def status_code(self) -> int:
        return int(self.value)

    @classmethod
    def from_status_code(cls, status_code: int) -> "ErrorKind":
        for kind in cls:
            if kind.status_code == status_code:
                return kind
        return cls.BAD_REQUEST if 400 <= status_code < 500 else cls.INTERNAL


class AppError(Exception):
    """An error with an explicit kind; status overrides the "error" label when given."""

    def __init__(self, kind: ErrorKind, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class RouteNotFoundError(AppError):
    def __init__(self, original_url: str):
        super().__init__(ErrorKind.NOT_FOUND, f"Route {original_url} not found")
        self.original_url = original_url


def resolve_error(exc: BaseException) -> Tuple[int, str, str]:
    """Map an exception to (status_code, status, message)."""
    if isinstance(exc, AppError):
        return exc.status_code, exc.status or DEFAULT_STATUS, exc.message
    if isinstance(exc, StarletteHTTPException):
        kind = ErrorKind.from_status_code(exc.status_code)
        return exc.status_code, DEFAULT_STATUS, str(exc.detail) if exc.detail else kind.value.phrase
    if isinstance(exc, RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Validation failed") if errors else "Validation failed"
        return ErrorKind.UNPROCESSABLE.status_code, DEFAULT_STATUS, message
    return ErrorKind.INTERNAL.status_code, DEFAULT_STATUS, str(exc) or ErrorKind.INTERNAL.value.phrase


def error_response(exc: BaseException) -> JSONResponse:
    status_code, status, message = resolve_error(exc)
    return JSONResponse(status_code=status_code, content=ErrorResponse(status=status, message=message).model_dump())
