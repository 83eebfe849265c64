# src/lol_toolkit/core/events.py

"""
In-process event bus.

Named event streams carrying plain payloads (usually dicts). The transport layer
emits on it (connection status changes, API call logs) and the sync layer listens.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]

STATUS_CHANGED_EVENT = "lcu-status-changed"
API_CALL_EVENT = "api-call"
AUTO_ACCEPT_STOPPED_EVENT = "auto-accept-stopped"


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, name: str, handler: EventHandler) -> Callable[[], None]:
        """Subscribe `handler` to `name`. Returns an unsubscribe callable."""
        self._handlers[name].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(name)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, name: str, payload: Any = None) -> int:
        """Deliver `payload` to every handler of `name`. Returns the number of handlers called."""
        handlers = list(self._handlers.get(name, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler failed event=%s", name)
        return len(handlers)

    def handler_count(self, name: str) -> int:
        return len(self._handlers.get(name, ()))
