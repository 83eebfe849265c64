# src/lol_toolkit/sync/summoner_poller.py

from __future__ import annotations

import logging

from ..core.models import CurrentSummoner, LcuStatus
from ..core.ports import SummonerSource
from ..core.state import StateCell
from ..tasks.task_models import PollingTask
from ..tasks.task_scheduler import TaskScheduler
from .intervals import PollingIntervals

logger = logging.getLogger(__name__)

SUMMONER_TASK_ID = "lcu-summoner"


class SummonerPoller:
    """
    Dependent-data poller: fetches the current summoner, but only while connected.

    Failures while connected are transient: logged, previous data kept,
    nothing surfaces as a tracker error.
    """

    def __init__(
        self,
        source: SummonerSource,
        status: StateCell[LcuStatus | None],
        *,
        intervals: PollingIntervals | None = None,
        scheduler: TaskScheduler | None = None,
    ) -> None:
        self._source = source
        self._status = status
        self._intervals = intervals or PollingIntervals()
        self._scheduler = scheduler or TaskScheduler()
        self.summoner: StateCell[CurrentSummoner | None] = StateCell(None, name="summoner")
        self._task: PollingTask[CurrentSummoner | None] = PollingTask(
            id=SUMMONER_TASK_ID,
            execute=self.fetch,
            get_interval=self.interval,
            on_result=self._on_result,
            on_error=self._on_error,
        )

    @property
    def is_executing(self) -> bool:
        return self._scheduler.is_executing(SUMMONER_TASK_ID)

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    def _is_connected(self) -> bool:
        status = self._status.get()
        return status is not None and status.connected is True

    def start(self) -> None:
        if not self._scheduler.is_scheduled(SUMMONER_TASK_ID):
            self._scheduler.schedule(self._task)
        else:
            self._scheduler.set_enabled(SUMMONER_TASK_ID, True)

    def stop(self) -> None:
        if self._scheduler.is_scheduled(SUMMONER_TASK_ID):
            self._scheduler.stop(SUMMONER_TASK_ID)

    async def refresh(self) -> None:
        await self._scheduler.refresh(SUMMONER_TASK_ID)

    async def wait_idle(self) -> None:
        await self._scheduler.wait_idle(SUMMONER_TASK_ID)

    def clear(self) -> None:
        if self.summoner.set(None):
            logger.debug("Summoner data cleared")

    async def fetch(self) -> CurrentSummoner | None:
        if not self._is_connected():
            return None
        return await self._source.get_current_summoner()

    def interval(self, result: CurrentSummoner | None, error: Exception | None) -> float:
        if not self._is_connected():
            return self._intervals.status_disconnected
        # Fast retries until the client has a logged-in summoner, then slow refresh.
        if self.summoner.get() is not None:
            return self._intervals.summoner_refresh
        return self._intervals.summoner_initial

    def _on_result(self, result: CurrentSummoner | None) -> None:
        if result is None:
            return
        # The status may have flipped while the request was in flight.
        if not self._is_connected():
            logger.debug("Discarding summoner result: no longer connected")
            return
        if self.summoner.set(result):
            logger.info("Summoner loaded: %s (level %d)", result.riot_id, result.summoner_level)

    def _on_error(self, error: Exception) -> None:
        logger.warning("Summoner fetch failed (will retry): %s", error)
