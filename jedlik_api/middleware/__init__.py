"""
Middleware Package

Request stages, in the order they run:
- favicon: serves /favicon.ico
- body_parser: JSON request bodies
- cookie_parser: plain, JSON and signed cookies
- request_logger: request id, timing and access log
"""
from .body_parser import JsonBodyMiddleware
from .cookie_parser import CookieParserMiddleware
from .favicon import FaviconMiddleware, load_favicon
from .request_logger import RequestLoggerMiddleware

__all__ = [
    "FaviconMiddleware",
    "load_favicon",
    "JsonBodyMiddleware",
    "CookieParserMiddleware",
    "RequestLoggerMiddleware",
]
