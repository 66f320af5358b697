"""
JSON body parser middleware.

Parses application/json (and +json) request bodies once, before routing, and
stores the result on request.state.json_body. Bodies over the limit, malformed
JSON and non-UTF charsets are answered here with a JSON error.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..core.errors import AppError, ErrorKind, error_response

logger = logging.getLogger(__name__)

DEFAULT_LIMIT_BYTES = 100 * 1024


def parse_content_type(header: Optional[str]) -> Tuple[str, str]:
    """Return (media type, charset) from a Content-Type header, both lowercased."""
    if not header:
        return "", ""
    media_type, _, params = header.partition(";")
    charset = ""
    for param in params.split(";"):
        key, _, value = param.strip().partition("=")
        if key.lower() == "charset":
            charset = value.strip().strip('"').lower()
    return media_type.strip().lower(), charset


def is_json_media_type(media_type: str) -> bool:
    return media_type == "application/json" or (media_type.startswith("application/") and media_type.endswith("+json"))


class JsonBodyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limit: int = DEFAULT_LIMIT_BYTES, strict: bool = True) -> None:
        super().__init__(app)
        self.limit = limit
        self.strict = strict

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        media_type, charset = parse_content_type(request.headers.get("content-type"))
        if not is_json_media_type(media_type):
            return await call_next(request)

        try:
            request.state.json_body = await self._read_json(request, charset)
        except AppError as exc:
            logger.info(f"body_parser_rejected reason={exc.kind.name}", extra={"path": request.url.path})
            return error_response(exc)

        return await call_next(request)

    async def _read_json(self, request: Request, charset: str) -> Any:
        if charset and not charset.startswith("utf-"):
            raise AppError(ErrorKind.UNSUPPORTED_MEDIA_TYPE, f'unsupported charset "{charset.upper()}"')

        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.limit:
            raise AppError(ErrorKind.PAYLOAD_TOO_LARGE, "request entity too large")

        body = await request.body()
        if len(body) > self.limit:
            raise AppError(ErrorKind.PAYLOAD_TOO_LARGE, "request entity too large")
        if not body.strip():
            return {}

        try:
            text = body.decode(charset or "utf-8")
        except (UnicodeDecodeError, LookupError):
            raise AppError(ErrorKind.UNSUPPORTED_MEDIA_TYPE, f'unsupported charset "{(charset or "utf-8").upper()}"')

        stripped = text.lstrip()
        if self.strict and stripped[:1] not in ("{", "["):
            raise AppError(ErrorKind.BAD_REQUEST, f"Unexpected token {stripped[:1]!r} in JSON at position 0")

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise AppError(ErrorKind.BAD_REQUEST, f"{exc.msg} in JSON at position {exc.pos}")
