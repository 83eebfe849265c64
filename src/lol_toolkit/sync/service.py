# src/lol_toolkit/sync/service.py

"""
LCU sync service.

The explicit object that owns the status tracker, the summoner poller, the
push bridge and (when a matchmaking source is given) the auto-accept poller. The process creates one, calls start()/stop() around its lifetime
and hands it to whoever needs the synchronized state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.models import ConnectionState, CurrentSummoner, LcuStatus, SyncSnapshot, connection_state
from ..core.ports import MatchmakingSource, PushChannel, StatusSource, SummonerSource
from ..core.state import StateCell
from ..tasks.task_scheduler import TaskScheduler
from .auto_accept import AUTO_ACCEPT_TASK_ID, AutoAcceptPoller
from .connection_tracker import ConnectionTracker
from .intervals import PollingIntervals
from .push_bridge import PushBridge
from .summoner_poller import SummonerPoller

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SyncSnapshot], None]


class LcuSyncService:
    def __init__(
        self,
        status_source: StatusSource,
        summoner_source: SummonerSource,
        channel: PushChannel,
        *,
        intervals: PollingIntervals | None = None,
        matchmaking_source: MatchmakingSource | None = None,
        auto_accept: bool = False,
        on_auto_accept_stopped: Callable[[str], None] | None = None,
    ) -> None:
        self.intervals = intervals or PollingIntervals()

        status: StateCell[LcuStatus | None] = StateCell(None, name="status")
        self.poller = SummonerPoller(
            summoner_source,
            status,
            intervals=self.intervals,
            scheduler=TaskScheduler(),
        )
        self.tracker = ConnectionTracker(
            status_source,
            self.poller,
            status,
            intervals=self.intervals,
            scheduler=TaskScheduler(),
        )
        self.bridge = PushBridge(
            channel,
            self.tracker,
            debounce_seconds=self.intervals.push_debounce,
        )
        # Shares the status task's scheduler.
        self.auto_accept: AutoAcceptPoller | None = None
        if matchmaking_source is not None:
            self.auto_accept = AutoAcceptPoller(
                matchmaking_source,
                status,
                intervals=self.intervals,
                scheduler=self.tracker.scheduler,
                enabled=auto_accept,
                on_stopped=on_auto_accept_stopped,
            )

        self._listeners: list[SnapshotListener] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._running = False

    # ---- lifecycle ----

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True

        for cell in (self.tracker.status, self.tracker.error, self.tracker.loading, self.poller.summoner):
            self._unsubscribers.append(cell.subscribe(self._on_cell_changed))
        if self.auto_accept is not None:
            for cell in (self.auto_accept.enabled, self.auto_accept.client_state):
                self._unsubscribers.append(cell.subscribe(self._on_cell_changed))
        for scheduler in (self.tracker.scheduler, self.poller.scheduler):
            self._unsubscribers.append(scheduler.add_listener(self._on_executing_changed))

        self.bridge.start()
        self.tracker.start()
        self.poller.start()
        if self.auto_accept is not None:
            self.auto_accept.start()
        logger.info(
            "LCU sync started (status %.0fs/%.0fs, summoner %.0fs/%.0fs)",
            self.intervals.status_disconnected,
            self.intervals.status_connected,
            self.intervals.summoner_initial,
            self.intervals.summoner_refresh,
        )

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False

        self.bridge.stop()
        if self.auto_accept is not None:
            self.auto_accept.stop()
        self.poller.stop()
        await self.tracker.stop()
        await self.tracker.scheduler.aclose()
        await self.poller.scheduler.aclose()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        logger.info("LCU sync stopped")

    async def refresh(self) -> None:
        await self.tracker.refresh()

    async def wait_idle(self) -> None:
        await self.tracker.wait_idle()

    async def set_auto_accept(self, enabled: bool) -> None:
        if self.auto_accept is None:
            raise RuntimeError("auto-accept is not available")
        self.auto_accept.set_enabled(enabled)

    # ---- store ----

    @property
    def status(self) -> LcuStatus | None:
        return self.tracker.status.get()

    @property
    def summoner(self) -> CurrentSummoner | None:
        return self.poller.summoner.get()

    @property
    def loading(self) -> bool:
        return self.tracker.loading.get()

    @property
    def error(self) -> str | None:
        return self.tracker.error.get()

    @property
    def is_polling(self) -> bool:
        return self.tracker.is_polling

    @property
    def connection_state(self) -> ConnectionState:
        return connection_state(self.status)

    def snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            status=self.status,
            summoner=self.summoner,
            loading=self.loading,
            error=self.error,
            is_polling=self.is_polling,
            auto_accept=self.auto_accept is not None and self.auto_accept.enabled.get(),
            client_state=self.auto_accept.client_state.get() if self.auto_accept is not None else None,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call `listener` with a fresh snapshot whenever any part of the store changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Snapshot listener failed")

    def _on_cell_changed(self, new: Any, old: Any) -> None:
        self._publish()

    def _on_executing_changed(self, task_id: str, executing: bool) -> None:
        if task_id == AUTO_ACCEPT_TASK_ID:
            return
        self._publish()
