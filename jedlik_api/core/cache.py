"""
Redis cache connector.

Connects with redis.asyncio and keeps retrying after a fixed delay until the
server answers a ping. The number of retries is unbounded unless
CACHE_MAX_RETRIES is set. Once connected, the server is pinged periodically and
failures are logged; the pings do not change the connection state.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, stop_never, wait_fixed

from .config import Settings
from .resources import ConnectionState, ManagedConnection

logger = logging.getLogger(__name__)

# ValueError covers a malformed REDIS_URL, which only surfaces as a failed attempt
CONNECT_ERRORS = (RedisError, OSError, ValueError)


class CacheConnector(ManagedConnection):
    """Owns the Redis client handle and its reconnect loop."""

    name = "redis"

    def __init__(
        self,
        settings: Settings,
        client_factory: Optional[Callable[..., Any]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        super().__init__()
        self.settings = settings
        self.retry_delay = settings.CACHE_RETRY_DELAY_SECONDS
        self.max_retries = settings.CACHE_MAX_RETRIES
        self._client_factory = client_factory or redis.from_url
        self._sleep = sleep
        self.client: Optional[redis.Redis] = None
        self.attempts = 0
        self._monitor_task: Optional[asyncio.Task] = None

    async def connect(self) -> bool:
        """Retry the whole connect until it succeeds or the retry budget runs out."""
        stop = stop_after_attempt(self.max_retries + 1) if self.max_retries else stop_never
        retrying = AsyncRetrying(
            stop=stop,
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(CONNECT_ERRORS),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._connect_once()
        except CONNECT_ERRORS:
            logger.error("cache_retries_exhausted", extra={"dependency": self.name, "attempt": self.attempts})
            return False

        self._monitor_task = asyncio.create_task(self._monitor(), name="redis-health-check")
        return True

    async def _connect_once(self) -> None:
        self.attempts += 1
        self._transition(ConnectionState.CONNECTING)
        client = None
        try:
            client = self._client_factory(
                self.settings.REDIS_URL,
                socket_connect_timeout=10,
                socket_keepalive=True,
            )
            await client.ping()
        except CONNECT_ERRORS as exc:
            logger.error(str(exc) or exc.__class__.__name__, extra={"dependency": self.name, "attempt": self.attempts})
            self._transition(ConnectionState.FAILED)
            if client is not None:
                await client.aclose()
            raise
        except BaseException:
            # Cancelled mid-attempt: the client was never adopted, so close() cannot reach it
            if client is not None:
                await client.aclose()
            raise

        self.client = client
        self._transition(ConnectionState.CONNECTED)
        logger.info("Redis client connected", extra={"dependency": self.name, "attempt": self.attempts})

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.info(
            f"cache_retry_scheduled delay_seconds={self.retry_delay}",
            extra={"dependency": self.name, "attempt": retry_state.attempt_number},
        )

    async def _monitor(self) -> None:
        interval = self.settings.CACHE_HEALTH_CHECK_INTERVAL_SECONDS
        while True:
            await asyncio.sleep(interval)
            try:
                await self.client.ping()
            except CONNECT_ERRORS as exc:
                logger.error(f"cache_error message={exc}", extra={"dependency": self.name})

    async def close(self) -> None:
        if self._monitor_task is not None and not self._monitor_task.done():
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass
        self._monitor_task = None

        if self.client is not None:
            try:
                await self.client.aclose()
            finally:
                self.client = None
        self._transition(ConnectionState.DISCONNECTED)
