"""
Connection state shared by the external dependency connectors.
"""
from __future__ import annotations

import enum
import logging

logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class ManagedConnection:
    """Base for a connector that owns one client handle and its connection state."""

    name = "resource"

    def __init__(self) -> None:
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def _transition(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        logger.debug(
            "connection_state_changed",
            extra={"dependency": self.name, "from_state": self._state.value, "to_state": state.value},
        )
        self._state = state
