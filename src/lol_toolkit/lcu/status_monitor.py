# src/lol_toolkit/lcu/status_monitor.py

from __future__ import annotations

import logging

import aiohttp

from ..core.events import STATUS_CHANGED_EVENT, EventBus
from ..core.models import ConnectionState

logger = logging.getLogger(__name__)

STATUS_ENDPOINT = "GetLCUStatus"

# (indicators, all_required)
_REFUSED_PATTERNS: tuple[tuple[tuple[str, ...], bool], ...] = (
    (("dial tcp", "actively refused"), True),
    (("connectex: no connection could be made",), False),
    (("connection refused",), False),
    (("connect call failed",), False),
    (("league client not running",), False),
    (("failed to connect",), False),
)


def is_connection_refused_error(exc: BaseException | None) -> bool:
    if exc is None:
        return False
    if isinstance(exc, (ConnectionRefusedError, aiohttp.ClientConnectorError)):
        return True

    text = str(exc).lower()
    for indicators, all_required in _REFUSED_PATTERNS:
        hit = all(i in text for i in indicators) if all_required else any(i in text for i in indicators)
        if not hit:
            continue
        # A 404 means the server answered; it is not a refused connection.
        if indicators[0] == "failed to connect" and "404" in text:
            continue
        return True
    return False


class ConnectionStatusMonitor:
    """
    Transport-side view of the connection.

    Emits `lcu-status-changed` with {"connected": bool} on the event bus,
    but only when the state actually changes.
    """

    def __init__(self, events: EventBus, *, event_name: str = STATUS_CHANGED_EVENT) -> None:
        self._events = events
        self._event_name = event_name
        self._state = ConnectionState.UNKNOWN

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        # Unknown counts as connected so the first calls are attempted at all.
        return self._state in (ConnectionState.CONNECTED, ConnectionState.UNKNOWN)

    def set_connected(self, connected: bool) -> bool:
        new_state = ConnectionState.CONNECTED if connected else ConnectionState.DISCONNECTED
        if new_state == self._state:
            return False

        old_state = self._state
        self._state = new_state
        logger.debug("Transport status %s -> %s", old_state, new_state)
        self._events.emit(self._event_name, {"connected": bool(connected)})
        return True

    def handle_connection_error(self, exc: BaseException, endpoint: str) -> bool:
        """Mark disconnected if `exc` means the client is gone. Returns True if handled."""
        if endpoint == STATUS_ENDPOINT or not is_connection_refused_error(exc):
            return False
        self.set_connected(False)
        return True
