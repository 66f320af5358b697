"""
Monitoring API

FastAPI router for monitoring endpoints:
- GET /status: Returns service metadata and the connection state of MongoDB and Redis
"""
from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Request

from .. import __version__
from ..models.api_models import StatusResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/status", response_model=StatusResponse)
async def status_endpoint(request: Request) -> StatusResponse:
    """Return service status and dependency connection states."""
    settings = request.app.state.settings
    connector = request.app.state.resource_connector

    response = StatusResponse(
        service=settings.APP_NAME,
        version=__version__,
        environment=settings.ENV,
        uptime_seconds=time.time() - request.app.state.started_at,
        dependencies=connector.status(),
    )

    logger.debug("status_requested", extra={"dependencies": response.dependencies})
    return response
