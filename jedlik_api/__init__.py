"""
Jedlik API Package

Bootstrap for the Jedlik HTTP service:
- core: Configuration, logging, errors and the MongoDB/Redis connectors
- middleware: Favicon, JSON body, cookie and request logging stages
- services: Resource connector that owns the dependency connections
- models: Pydantic response models
- api: FastAPI routers for health, monitoring and the fallback
- server: Application bootstrapper
"""

__version__ = "1.0.0"
__all__ = ["core", "middleware", "services", "models", "api", "server"]
