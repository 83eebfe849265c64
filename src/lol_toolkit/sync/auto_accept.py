# src/lol_toolkit/sync/auto_accept.py

"""
Auto-accept poller.

A third polling task, gated on the connection: it reads the gameflow phase,
and while the player is queued it watches the ready check and accepts it.

The interval follows the client state:
- match found: very fast, the ready check only lasts a few seconds,
- in queue: fast,
- anything else: slow.
Repeated "no ready check" answers fall back to the slow rate until one appears.

Auto-accept turns itself off once a game starts (one accept per queue) and when
the client refuses connections; `on_stopped` is told why.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.models import ClientState, LcuStatus, client_state_for_phase
from ..core.ports import MatchmakingSource
from ..core.state import StateCell
from ..lcu.errors import LcuApiError, LcuError
from ..lcu.status_monitor import is_connection_refused_error
from ..tasks.task_models import PollingTask
from ..tasks.task_scheduler import TaskScheduler
from .intervals import PollingIntervals

logger = logging.getLogger(__name__)

AUTO_ACCEPT_TASK_ID = "lcu-auto-accept"

STOP_REASON_GAME_STARTED = "game_started"
STOP_REASON_CONNECTION_ERROR = "connection_error"

_QUEUED_STATES = (ClientState.IN_QUEUE, ClientState.MATCH_FOUND)


class AutoAcceptPoller:
    def __init__(
        self,
        source: MatchmakingSource,
        status: StateCell[LcuStatus | None],
        *,
        intervals: PollingIntervals | None = None,
        scheduler: TaskScheduler | None = None,
        enabled: bool = False,
        on_stopped: Callable[[str], None] | None = None,
    ) -> None:
        self._source = source
        self._status = status
        self._intervals = intervals or PollingIntervals()
        self._scheduler = scheduler or TaskScheduler()
        self._on_stopped = on_stopped

        self.enabled: StateCell[bool] = StateCell(bool(enabled), name="auto_accept")
        # None until the first phase was read.
        self.client_state: StateCell[ClientState | None] = StateCell(None, name="client_state")
        self.misses = 0
        self.accepted = 0

        self._task: PollingTask[ClientState | None] = PollingTask(
            id=AUTO_ACCEPT_TASK_ID,
            execute=self.check,
            get_interval=self.interval,
            on_error=self._on_error,
            enabled=self.enabled.get(),
        )

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._scheduler.is_scheduled(AUTO_ACCEPT_TASK_ID) and self._scheduler.is_enabled(AUTO_ACCEPT_TASK_ID)

    def _is_connected(self) -> bool:
        status = self._status.get()
        return status is not None and status.connected is True

    # ---- lifecycle ----

    def start(self) -> None:
        if not self._scheduler.is_scheduled(AUTO_ACCEPT_TASK_ID):
            self._task.enabled = self.enabled.get()
            self._scheduler.schedule(self._task)
        else:
            self._scheduler.set_enabled(AUTO_ACCEPT_TASK_ID, self.enabled.get())

    def stop(self) -> None:
        if self._scheduler.is_scheduled(AUTO_ACCEPT_TASK_ID):
            self._scheduler.stop(AUTO_ACCEPT_TASK_ID)

    def set_enabled(self, enabled: bool) -> None:
        """Turn auto-accept on or off. Takes effect on the loop only once started."""
        enabled = bool(enabled)
        if self.enabled.set(enabled):
            logger.info("Auto-accept %s", "enabled" if enabled else "disabled")
        if enabled:
            self.misses = 0
            self.client_state.set(None)
        if self._scheduler.is_scheduled(AUTO_ACCEPT_TASK_ID):
            self._scheduler.set_enabled(AUTO_ACCEPT_TASK_ID, enabled)

    async def wait_idle(self) -> None:
        if self._scheduler.is_scheduled(AUTO_ACCEPT_TASK_ID):
            await self._scheduler.wait_idle(AUTO_ACCEPT_TASK_ID)

    # ---- task ----

    async def check(self) -> ClientState | None:
        if not self._is_connected():
            return self.client_state.get()

        try:
            phase = await self._source.get_gameflow_phase()
        except LcuError:
            self.misses += 1
            raise

        state = client_state_for_phase(phase)
        previous = self.client_state.get()
        self.client_state.set(state)

        if previous is not None and previous != state and state == ClientState.IN_GAME:
            self._disable(STOP_REASON_GAME_STARTED)
            return state

        if state not in _QUEUED_STATES:
            self.misses = 0
            return state

        try:
            ready_check = await self._source.get_ready_check()
        except LcuApiError as exc:
            if exc.status_code != 404:
                raise
            self.misses += 1
            return state

        self.misses = 0
        if ready_check.acceptable:
            await self._source.accept_match()
            self.accepted += 1
            logger.info("Ready check accepted")
        return state

    def interval(self, result: ClientState | None, error: Exception | None) -> float:
        if self.misses >= self._intervals.auto_accept_miss_limit:
            return self._intervals.auto_accept_idle

        state = self.client_state.get()
        if state == ClientState.MATCH_FOUND:
            return self._intervals.auto_accept_match_found
        if state == ClientState.IN_QUEUE:
            return self._intervals.auto_accept_in_queue
        return self._intervals.auto_accept_idle

    def _on_error(self, error: Exception) -> None:
        if is_connection_refused_error(error) or is_connection_refused_error(error.__cause__):
            logger.warning("Auto-accept stopped: client refused the connection")
            self._disable(STOP_REASON_CONNECTION_ERROR)
            return
        logger.debug("Auto-accept check failed: %s", error)

    def _disable(self, reason: str) -> None:
        self.set_enabled(False)
        logger.info("Auto-accept turned off (%s)", reason)
        if self._on_stopped is not None:
            try:
                self._on_stopped(reason)
            except Exception:
                logger.exception("Auto-accept stop callback failed")
