# src/lol_toolkit/sync/push_bridge.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..core.events import STATUS_CHANGED_EVENT
from ..core.models import LcuStatus
from ..core.ports import PushChannel, StatusSink

logger = logging.getLogger(__name__)

CONNECTION_REFUSED_MESSAGE = "League client connection refused"


class DebounceTimer:
    """Single-slot timer: arming it again replaces the pending call."""

    __slots__ = ("_handle",)

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, delay: float, callback: Callable[..., None], *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., None], args: tuple[Any, ...]) -> None:
        self._handle = None
        callback(*args)


def parse_connected(payload: Any) -> bool | None:
    """Return the `connected` flag, or None if the payload is malformed."""
    if not isinstance(payload, Mapping):
        return None
    value = payload.get("connected")
    # bool only: 0/1, "true", None are rejected rather than coerced
    if type(value) is not bool:
        return None
    return value


class PushBridge:
    """
    Reconciles pushed connection-status notifications with the tracker.

    Bursts are debounced; after the window only the last value is compared to
    the tracker's stored flag and applied if it differs.
    """

    def __init__(
        self,
        channel: PushChannel,
        sink: StatusSink,
        *,
        debounce_seconds: float = 0.5,
        event_name: str = STATUS_CHANGED_EVENT,
    ) -> None:
        self._channel = channel
        self._sink = sink
        self._debounce = max(0.0, float(debounce_seconds))
        self._event_name = event_name
        self._timer = DebounceTimer()
        self._unsubscribe: Callable[[], None] | None = None
        self.reconciliations = 0
        self.applied = 0

    @property
    def pending(self) -> bool:
        return self._timer.pending

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._channel.on(self._event_name, self._on_event)

    def stop(self) -> None:
        self._timer.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, payload: Any) -> None:
        connected = parse_connected(payload)
        if connected is None:
            logger.debug("Ignoring malformed %s payload: %r", self._event_name, payload)
            return
        self._timer.arm(self._debounce, self._reconcile, connected)

    def _reconcile(self, connected: bool) -> None:
        self.reconciliations += 1
        if self._sink.connected == connected:
            return

        self.applied += 1
        logger.debug("Push status differs from stored state, applying connected=%s", connected)
        self._sink.apply_status(
            LcuStatus(connected=connected, error=None if connected else CONNECTION_REFUSED_MESSAGE)
        )
