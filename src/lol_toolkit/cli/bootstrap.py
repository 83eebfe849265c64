# src/lol_toolkit/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the event bus, LCU transport and sync service into AppState,
- keeps a bounded log of recent API calls for diagnostics.
"""

from __future__ import annotations

import logging
from collections import deque

from ..config import get_settings
from ..core.events import API_CALL_EVENT, AUTO_ACCEPT_STOPPED_EVENT, EventBus
from ..core.state import AppState
from ..lcu.client import LcuClient
from ..lcu.connection import ConnectionLocator
from ..lcu.status_monitor import ConnectionStatusMonitor
from ..sync.intervals import PollingIntervals
from ..sync.service import LcuSyncService

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    events = EventBus()
    locator = ConnectionLocator(
        lockfile_path=settings.lcu_lockfile_path,
        cache_ttl=settings.lcu_connection_cache_ttl,
    )
    monitor = ConnectionStatusMonitor(events)
    client = LcuClient(
        locator,
        monitor,
        events,
        host=settings.lcu_host,
        timeout_seconds=settings.lcu_request_timeout,
    )
    service = LcuSyncService(
        client,
        client,
        events,
        intervals=PollingIntervals.from_settings(settings),
        matchmaking_source=client,
        auto_accept=bool(getattr(settings, "auto_accept_enabled", False)),
        on_auto_accept_stopped=lambda reason: events.emit(AUTO_ACCEPT_STOPPED_EVENT, {"reason": reason}),
    )

    state = AppState(
        settings=settings,
        events=events,
        client=client,
        service=service,
        api_log=deque(maxlen=int(getattr(settings, "api_log_size", 50))),
    )
    # Newest first, like the debug panel.
    events.on(API_CALL_EVENT, state.api_log.appendleft)
    return state
