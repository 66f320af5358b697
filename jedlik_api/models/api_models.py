"""
API Models

Pydantic models for API responses:
- HealthResponse: For the health check endpoint
- StatusResponse: For the monitoring endpoint
- ErrorResponse: Body of every error answered by the service
"""
from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Health status")
    message: str = Field(..., description="Greeting message")


class StatusResponse(BaseModel):
    """Response model for status/monitoring endpoint."""

    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")
    dependencies: Dict[str, str] = Field(..., description="Connection state per external dependency")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    status: str = Field("error", description="Error label")
    message: str = Field(..., description="Human-readable error message")
