"""
Resource Connector

Brings up the external dependencies independently of request traffic:
- MongoDB: one attempt, failure logged and left failed
- Redis: retried after a fixed delay until it connects

start() schedules both attempts without waiting for them, so the server accepts
traffic while they are still in flight. stop() cancels whatever is still running
and closes the clients.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from ..core.cache import CacheConnector
from ..core.config import Settings
from ..core.mongo import DocumentStoreConnector

logger = logging.getLogger(__name__)


class ResourceConnector:
    """Owns the document store and cache connectors for one application instance."""

    def __init__(
        self,
        settings: Settings,
        document_store: Optional[DocumentStoreConnector] = None,
        cache: Optional[CacheConnector] = None,
    ):
        self.settings = settings
        self.document_store = document_store or DocumentStoreConnector(settings)
        self.cache = cache or CacheConnector(settings)
        self._tasks: List[asyncio.Task] = []

    def start(self) -> None:
        """Schedule the connection attempts on the running loop and return immediately."""
        if self._tasks:
            return
        logger.info("resource_connector_start")
        self._tasks = [
            asyncio.create_task(self.document_store.connect(), name="mongodb-connect"),
            asyncio.create_task(self.cache.connect(), name="redis-connect"),
        ]
        for task in self._tasks:
            task.add_done_callback(_log_task_failure)

    async def stop(self) -> None:
        for task in self._tasks:
            if not task.done():
                task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        self.document_store.close()
        await self.cache.close()
        logger.info("resource_connector_stopped")

    def status(self) -> Dict[str, str]:
        return {
            self.document_store.name: self.document_store.state.value,
            self.cache.name: self.cache.state.value,
        }


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"connector_task_failed task={task.get_name()}", exc_info=exc)
