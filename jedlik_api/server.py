"""
Application bootstrapper.

ServerBootstrap assembles a ready-to-listen FastAPI application:
- Resource connector attached to the app and driven by the lifespan
- Middleware in a fixed order: favicon, JSON body, cookies, CORS, request logger
- Health check and monitoring routes
- Catch-all 404 route and terminal error handlers (ENABLE_FALLBACK)

listen() binds uvicorn to HOST:PORT.
"""
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.fallback_api import install_error_handlers, router as fallback_router
from .api.health_api import router as health_router
from .api.monitoring_api import router as monitoring_router
from .core.config import Settings, get_settings
from .core.logging import bind_context
from .middleware import (
    CookieParserMiddleware,
    FaviconMiddleware,
    JsonBodyMiddleware,
    RequestLoggerMiddleware,
    load_favicon,
)
from .services.resource_connector import ResourceConnector

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]

MiddlewareStage = Tuple[str, type, Dict[str, Any]]


class ServerBootstrap:
    def __init__(self, settings: Optional[Settings] = None, connector: Optional[ResourceConnector] = None):
        self.settings = settings or get_settings()
        self.connector = connector or ResourceConnector(self.settings)
        self.app: Optional[FastAPI] = None

    def initialize(self) -> FastAPI:
        """Create the application, attach the connector, then register middleware and routes."""
        settings = self.settings
        connector = self.connector

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
            with bind_context(logger, service=settings.APP_NAME, env=settings.ENV) as log:
                log.info("service_startup")

            # Connections are not awaited; traffic is accepted while they are in flight
            connector.start()
            try:
                yield
            finally:
                logger.info("service_shutdown")
                await connector.stop()

        app = FastAPI(
            title="Jedlik API",
            description="HTTP service bootstrap with MongoDB and Redis connectivity",
            version=__version__,
            lifespan=lifespan,
        )
        app.state.settings = settings
        app.state.resource_connector = connector
        app.state.started_at = time.time()
        self.app = app

        self.register_middleware()
        self.register_health_check()
        if settings.ENABLE_FALLBACK:
            self.register_fallback()
        return app

    def middleware_stages(self) -> List[MiddlewareStage]:
        """Stages in execution order. A stage that cannot be built is logged and left out."""
        settings = self.settings
        stages: List[MiddlewareStage] = []

        try:
            stages.append(("favicon", FaviconMiddleware, {"icon": load_favicon(settings.FAVICON_PATH)}))
        except (OSError, ValueError) as exc:
            logger.warning(f"favicon_unavailable message={exc}", extra={"path": settings.FAVICON_PATH})

        stages.append(("body-parser", JsonBodyMiddleware, {"limit": settings.JSON_BODY_LIMIT_BYTES}))
        stages.append(("cookie-parser", CookieParserMiddleware, {"secret": settings.COOKIE_SECRET}))
        stages.append(
            (
                "cors",
                CORSMiddleware,
                {
                    "allow_origins": settings.CORS_ORIGINS,
                    "allow_credentials": True,
                    "allow_methods": CORS_METHODS,
                    "allow_headers": settings.CORS_ALLOW_HEADERS,
                    "expose_headers": settings.CORS_EXPOSE_HEADERS,
                },
            )
        )
        stages.append(("request-logger", RequestLoggerMiddleware, {}))
        return stages

    def register_middleware(self) -> None:
        stages = self.middleware_stages()
        # add_middleware wraps the current stack, so the stage added last runs first
        for _, middleware_class, options in reversed(stages):
            self.app.add_middleware(middleware_class, **options)
        self.app.state.middleware_order = [name for name, _, _ in stages]

    def register_health_check(self) -> None:
        self.app.include_router(health_router, tags=["health"])
        self.app.include_router(monitoring_router, tags=["monitoring"])

    def register_fallback(self) -> None:
        self.app.include_router(fallback_router)
        install_error_handlers(self.app)

    def listen(self) -> None:
        """Serve until interrupted. A bind failure ends the process through uvicorn."""
        if self.app is None:
            self.initialize()
        config = uvicorn.Config(
            self.app,
            host=self.settings.HOST,
            port=self.settings.PORT,
            log_level=self.settings.LOG_LEVEL.lower(),
            log_config=None,
        )
        asyncio.run(self._serve(uvicorn.Server(config)))

    async def _serve(self, server: uvicorn.Server) -> None:
        serving = asyncio.create_task(server.serve())
        while not server.started and not serving.done():
            await asyncio.sleep(0.05)
        if server.started:
            logger.info(f"App listening on the port {self.settings.PORT}")
        await serving


def create_app(settings: Optional[Settings] = None, connector: Optional[ResourceConnector] = None) -> FastAPI:
    return ServerBootstrap(settings, connector).initialize()
