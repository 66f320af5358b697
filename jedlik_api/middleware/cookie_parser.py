"""
Cookie parser middleware.

Populates request.state.cookies from the Cookie header. Values prefixed "j:" are
decoded as JSON. With a secret configured, values prefixed "s:" are verified and
moved to request.state.signed_cookies; a bad signature yields False.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Any, Dict, Optional, Union
from urllib.parse import unquote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

SIGNED_PREFIX = "s:"
JSON_PREFIX = "j:"


def sign(value: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).digest()
    return f"{value}.{base64.b64encode(digest).decode('ascii').rstrip('=')}"


def unsign(signed: str, secret: str) -> Union[str, bool]:
    value, sep, _ = signed.rpartition(".")
    if not sep:
        return False
    if hmac.compare_digest(sign(value, secret).encode("utf-8"), signed.encode("utf-8")):
        return value
    return False


def json_cookie(value: Any) -> Any:
    if not isinstance(value, str) or not value.startswith(JSON_PREFIX):
        return value
    try:
        return json.loads(value[len(JSON_PREFIX):])
    except json.JSONDecodeError:
        return value


def parse_cookies(raw: Dict[str, str], secret: Optional[str] = None):
    """Split raw cookies into (plain, signed), decoding JSON cookies in both."""
    plain: Dict[str, Any] = {}
    signed: Dict[str, Any] = {}
    for name, value in raw.items():
        value = unquote(value)
        if secret and value.startswith(SIGNED_PREFIX):
            signed[name] = json_cookie(unsign(value[len(SIGNED_PREFIX):], secret))
        else:
            plain[name] = json_cookie(value)
    return plain, signed


class CookieParserMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, secret: Optional[str] = None) -> None:
        super().__init__(app)
        self.secret = secret

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.cookies, request.state.signed_cookies = parse_cookies(request.cookies, self.secret)
        return await call_next(request)
