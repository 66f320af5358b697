"""
Jedlik API - Application Entrypoint

Builds the application from environment settings (.env supported):
- Structured JSON logging
- Middleware: favicon, JSON body parser, cookie parser, CORS, request logger
- MongoDB and Redis connections started in the background at startup
- Health check, monitoring and catch-all routes

Run with `python main.py`, or `uvicorn main:app` to let uvicorn own the socket.
"""

from jedlik_api.core.config import get_settings
from jedlik_api.core.logging import configure_logging
from jedlik_api.server import ServerBootstrap

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

bootstrap = ServerBootstrap(settings)
app = bootstrap.initialize()


if __name__ == "__main__":
    bootstrap.listen()
