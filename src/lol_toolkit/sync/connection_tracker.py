# src/lol_toolkit/sync/connection_tracker.py

"""
Connection tracker.

Polls the local client status on its own task, detects disconnected -> connected
edges and drives the summoner poller:
- every disconnected result clears summoner data,
- a newly-connected result refreshes the summoner immediately (bypassing its timer).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from ..core.models import LcuStatus
from ..core.ports import StatusSource
from ..core.state import StateCell
from ..tasks.task_models import PollingTask
from ..tasks.task_scheduler import TaskScheduler
from .intervals import PollingIntervals
from .summoner_poller import SummonerPoller

logger = logging.getLogger(__name__)

STATUS_TASK_ID = "lcu-status"


class ConnectionTracker:
    def __init__(
        self,
        source: StatusSource,
        poller: SummonerPoller,
        status: StateCell[LcuStatus | None],
        *,
        intervals: PollingIntervals | None = None,
        scheduler: TaskScheduler | None = None,
    ) -> None:
        self._source = source
        self._poller = poller
        self._intervals = intervals or PollingIntervals()
        self._scheduler = scheduler or TaskScheduler()

        self.status = status
        self.error: StateCell[str | None] = StateCell(None, name="error")
        self.loading: StateCell[bool] = StateCell(True, name="loading")

        # None = no result seen yet.
        self._prev_connected: bool | None = None
        self.dependent_refreshes = 0

        self._pending: set[asyncio.Task[Any]] = set()
        self._unwatch = None
        self._task: PollingTask[LcuStatus] = PollingTask(
            id=STATUS_TASK_ID,
            execute=self._fetch_status,
            get_interval=self.interval,
            on_result=self.apply_status,
            on_error=self._on_status_error,
        )

    # ---- public ----

    @property
    def connected(self) -> bool:
        status = self.status.get()
        return status is not None and status.connected is True

    @property
    def is_polling(self) -> bool:
        return self._scheduler.is_executing(STATUS_TASK_ID) or self._poller.is_executing

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    def start(self) -> None:
        if self._unwatch is None:
            self._unwatch = self.status.subscribe(self._on_status_changed)
        if not self._scheduler.is_scheduled(STATUS_TASK_ID):
            self._scheduler.schedule(self._task)
        else:
            self._scheduler.set_enabled(STATUS_TASK_ID, True)

    async def stop(self) -> None:
        if self._scheduler.is_scheduled(STATUS_TASK_ID):
            self._scheduler.stop(STATUS_TASK_ID)
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def refresh(self) -> None:
        """Run the status and summoner tasks now, in parallel, and wait for both."""
        await asyncio.gather(
            self._scheduler.refresh(STATUS_TASK_ID),
            self._poller.refresh(),
        )

    async def poll_status(self) -> None:
        """Run only the status task now."""
        await self._scheduler.refresh(STATUS_TASK_ID)

    async def wait_idle(self) -> None:
        """Wait until neither task nor any edge-triggered refresh is running."""
        while True:
            await self._scheduler.wait_idle(STATUS_TASK_ID)
            if self._pending:
                await asyncio.gather(*list(self._pending), return_exceptions=True)
            await self._poller.wait_idle()
            if not self._pending and not self._scheduler.is_executing(STATUS_TASK_ID):
                return

    def interval(self, result: LcuStatus | None, error: Exception | None) -> float:
        if result is not None and result.connected is True:
            return self._intervals.status_connected
        return self._intervals.status_disconnected

    def apply_status(self, status: LcuStatus) -> None:
        """
        Common path for polled and synthesized statuses.

        The edge flag is updated before the cell so the backup observer does not
        see the same edge a second time.
        """
        was_connected = self._prev_connected
        is_connected = status.connected is True
        newly_connected = was_connected is not True and is_connected
        self._prev_connected = is_connected

        if self.status.set(status):
            if is_connected:
                logger.info("League client connected (port=%s)", status.port or "?")
            else:
                logger.info("League client disconnected: %s", status.error or "no reason")
        self.error.set(None)
        self.loading.set(False)

        if not is_connected:
            self._poller.clear()
        elif newly_connected:
            self._trigger_dependent_refresh()

    # ---- internals ----

    async def _fetch_status(self) -> LcuStatus:
        return await self._source.get_status()

    def _on_status_error(self, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        logger.warning("Status check failed: %s", message)

        self._prev_connected = False
        self.error.set(message)
        self.status.set(LcuStatus.disconnected(message))
        self._poller.clear()
        self.loading.set(False)

    def _on_status_changed(self, new: LcuStatus | None, old: LcuStatus | None) -> None:
        # Backup detector for status writes that did not go through apply_status.
        if new is None:
            return
        is_connected = new.connected is True
        if self._prev_connected is not True and is_connected:
            self._prev_connected = True
            self._trigger_dependent_refresh()

    def _trigger_dependent_refresh(self) -> None:
        self.dependent_refreshes += 1
        logger.debug("Newly connected; refreshing summoner now")
        self._spawn(self._poller.refresh())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
