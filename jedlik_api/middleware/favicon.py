"""
Favicon middleware.

Answers /favicon.ico from an icon held in memory so the request never reaches
logging or routing. The icon is read once, at registration time.
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

FAVICON_PATH = "/favicon.ico"
ONE_YEAR_SECONDS = 60 * 60 * 24 * 365
ALLOWED_METHODS = "GET, HEAD, OPTIONS"


def load_favicon(path: Union[str, Path]) -> bytes:
    """Read the icon file. Raises OSError when it is missing or unreadable."""
    icon = Path(path).read_bytes()
    if not icon:
        raise ValueError(f"Favicon file is empty: {path}")
    return icon


class FaviconMiddleware:
    def __init__(self, app: ASGIApp, icon: bytes, max_age: int = ONE_YEAR_SECONDS) -> None:
        self.app = app
        self.icon = icon
        self.etag = '"%s"' % hashlib.md5(icon).hexdigest()
        self.cache_control = f"public, max-age={max_age}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] != FAVICON_PATH:
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        if method not in ("GET", "HEAD"):
            status_code = 200 if method == "OPTIONS" else 405
            response = Response(status_code=status_code, headers={"Allow": ALLOWED_METHODS})
        elif self._is_fresh(Headers(scope=scope)):
            response = Response(status_code=304, headers={"ETag": self.etag, "Cache-Control": self.cache_control})
        else:
            response = Response(
                content=self.icon,
                media_type="image/x-icon",
                headers={"ETag": self.etag, "Cache-Control": self.cache_control},
            )
        await response(scope, receive, send)

    def _is_fresh(self, headers: Headers) -> bool:
        if_none_match = headers.get("if-none-match")
        if not if_none_match:
            return False
        candidates = [tag.strip() for tag in if_none_match.split(",")]
        return "*" in candidates or self.etag in candidates or f"W/{self.etag}" in candidates
