"""
MongoDB connector.

Opens an AsyncIOMotorClient against the Atlas SRV URI built from settings and
confirms it with a ping. A failed attempt is logged and left failed: reconnection
after that point belongs to the driver's own server monitoring. Topology events
from the driver are logged for the lifetime of the client.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import monitoring
from pymongo.errors import PyMongoError

from .config import Settings
from .resources import ConnectionState, ManagedConnection

logger = logging.getLogger(__name__)

CONNECT_FAILED_MESSAGE = "Unable to connect to the server. Please start MongoDB."


class TopologyEventLogger(monitoring.ServerListener, monitoring.ServerHeartbeatListener):
    """Logs server availability changes and heartbeat failures reported by the driver."""

    def opened(self, event: monitoring.ServerOpeningEvent) -> None:
        logger.debug("mongo_server_opened", extra={"dependency": "mongodb", "address": str(event.server_address)})

    def description_changed(self, event: monitoring.ServerDescriptionChangedEvent) -> None:
        was_known = event.previous_description.is_server_type_known
        is_known = event.new_description.is_server_type_known
        if is_known and not was_known:
            logger.info("Connected to MongoDB server.", extra={"dependency": "mongodb", "address": str(event.server_address)})
        elif was_known and not is_known:
            logger.warning("mongo_server_unavailable", extra={"dependency": "mongodb", "address": str(event.server_address)})

    def closed(self, event: monitoring.ServerClosedEvent) -> None:
        logger.debug("mongo_server_closed", extra={"dependency": "mongodb", "address": str(event.server_address)})

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        pass

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        logger.error(
            f"mongo_error message={event.reply}",
            extra={"dependency": "mongodb", "address": str(event.connection_id)},
        )


class DocumentStoreConnector(ManagedConnection):
    """Owns the MongoDB client handle for the process."""

    name = "mongodb"

    def __init__(self, settings: Settings, client_factory: Optional[Callable[..., Any]] = None):
        super().__init__()
        self.settings = settings
        self._client_factory = client_factory or AsyncIOMotorClient
        self.client: Optional[AsyncIOMotorClient] = None

    async def connect(self) -> bool:
        """Make a single connection attempt. Returns True once the server answers a ping."""
        self._transition(ConnectionState.CONNECTING)
        try:
            self.client = self._client_factory(
                self.settings.mongo_uri,
                appname=self.settings.APP_NAME,
                serverSelectionTimeoutMS=self.settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
                event_listeners=[TopologyEventLogger()],
            )
            await self.client.admin.command("ping")
        except PyMongoError as exc:
            logger.error(CONNECT_FAILED_MESSAGE, extra={"dependency": self.name, "error": str(exc)})
            self._transition(ConnectionState.FAILED)
            return False

        logger.info("mongo_connected", extra={"dependency": self.name, "database": self.settings.MONGO_DB})
        self._transition(ConnectionState.CONNECTED)
        return True

    def close(self) -> None:
        if self.client is not None:
            try:
                self.client.close()
            finally:
                self.client = None
        self._transition(ConnectionState.DISCONNECTED)
