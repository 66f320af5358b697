"""
API Package

Contains FastAPI routers for:
- health_api: /healthChecker endpoint
- monitoring_api: /status endpoint with dependency states
- fallback_api: catch-all 404 route and the terminal error handlers
"""

__all__ = ["health_api", "monitoring_api", "fallback_api"]
