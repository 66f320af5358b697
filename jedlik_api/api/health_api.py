"""
Health API

- GET /healthChecker: fixed success payload, no dependency checks
"""
from __future__ import annotations

from fastapi import APIRouter

from ..models.api_models import HealthResponse

router = APIRouter()

HEALTH_MESSAGE = "Welcome to CodevoWeb????"


@router.get("/healthChecker", response_model=HealthResponse)
async def health_checker() -> HealthResponse:
    return HealthResponse(status="success", message=HEALTH_MESSAGE)
