"""
Application configuration using Pydantic Settings.

This module defines the Settings object used across the service to configure:
- App metadata, environment and the listening socket
- MongoDB Atlas connectivity (user, password, host path, database name)
- Redis cache connectivity and the reconnect policy
- Middleware options (favicon, JSON body limit, cookie signing, CORS)
- Logging level

Values are read from environment variables with development defaults.
Use a .env file in development; in production, set environment variables via the platform's secret management.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "https://jedlik-vite-quasar-template.netlify.app",
    "https://jedlik-vite-ts-template.netlify.app",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]

DEFAULT_CORS_ALLOW_HEADERS = [
    "Content-Type",
    "Authorization",
    "Cache-Control",
    "Content-Language",
    "Expires",
    "Last-Modified",
    "Pragma",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App metadata
    APP_NAME: str = Field("jedlik-api")
    ENV: Literal["dev", "test", "staging", "prod"] = Field("dev")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field("INFO")

    # Listening socket
    HOST: str = Field("0.0.0.0")
    PORT: int = Field(8080)

    # MongoDB Atlas; the URI is assembled verbatim, nothing is validated before connecting
    MONGO_USER: str = Field("")
    MONGO_PASSWORD: str = Field("")
    MONGO_PATH: str = Field("")
    MONGO_DB: str = Field("")
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = Field(30000, ge=0)

    # Redis cache
    REDIS_URL: str = Field("redis://localhost:6379")
    CACHE_RETRY_DELAY_SECONDS: float = Field(5.0, ge=0)
    CACHE_MAX_RETRIES: Optional[int] = Field(None, ge=1, description="Unset means retry forever")
    CACHE_HEALTH_CHECK_INTERVAL_SECONDS: float = Field(30.0, gt=0)

    # Middleware
    FAVICON_PATH: str = Field("favicon.ico")
    JSON_BODY_LIMIT_BYTES: int = Field(100 * 1024, gt=0)
    COOKIE_SECRET: Optional[str] = Field(None)

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    CORS_ALLOW_HEADERS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ALLOW_HEADERS))
    CORS_EXPOSE_HEADERS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["Set-Cookie"])

    # Catch-all 404 route and terminal error handler
    ENABLE_FALLBACK: bool = Field(True)

    # Parse comma-separated lists from env if provided as string
    @field_validator("CORS_ORIGINS", "CORS_ALLOW_HEADERS", "CORS_EXPOSE_HEADERS", mode="before")
    @classmethod
    def _split_csv(cls, v):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @property
    def mongo_uri(self) -> str:
        return (
            f"mongodb+srv://{self.MONGO_USER}:{self.MONGO_PASSWORD}{self.MONGO_PATH}{self.MONGO_DB}"
            "?retryWrites=true&w=majority"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance.

    Use lru_cache to avoid re-parsing environment variables. Tests may clear the cache if needed.
    """
    return Settings()  # type: ignore[arg-type]
