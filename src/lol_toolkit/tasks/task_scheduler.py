# src/lol_toolkit/tasks/task_scheduler.py

"""
Task scheduler.

Runs each registered PollingTask in a self-rescheduling loop:
- execute the operation (never two at once for the same task),
- hand the result or error to the task callbacks,
- ask the task for the next delay and arm exactly one timer.

Failures never stop the loop. Timers are plain loop.call_later handles, so
stop()/aclose() can cancel them deterministically.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .task_models import PollingTask, RunState

logger = logging.getLogger(__name__)

ExecutingListener = Callable[[str, bool], None]

# Used when a task's interval function itself fails before any delay was computed.
DEFAULT_FALLBACK_DELAY = 5.0


class TaskScheduler:
    def __init__(self, *, fallback_delay: float = DEFAULT_FALLBACK_DELAY) -> None:
        self._states: dict[str, RunState] = {}
        self._listeners: list[ExecutingListener] = []
        self._fallback_delay = max(0.0, float(fallback_delay))

    # ---- registration / lifecycle ----

    def schedule(self, task: PollingTask[Any]) -> None:
        """Register `task` and, if enabled, run its first cycle right away."""
        if task.id in self._states:
            raise ValueError(f"Task {task.id!r} is already scheduled")

        state = RunState(task=task, enabled=task.enabled)
        state.idle.set()
        self._states[task.id] = state
        logger.debug("Task scheduled id=%s enabled=%s", task.id, state.enabled)

        if state.enabled:
            self._spawn(state)

    async def refresh(self, task_id: str) -> None:
        """
        Cancel the armed timer and run now.

        If a cycle is already running (or queued) this call is a no-op; that cycle
        re-arms the timer when it finishes. The cycle is tracked like a timer
        cycle, so aclose() waits for it too.
        """
        state = self._state(task_id)
        self._clear_timer(state)
        if not state.enabled or state.executing or state.cycles:
            return
        await self._spawn(state)

    def stop(self, task_id: str) -> None:
        state = self._state(task_id)
        state.enabled = False
        self._clear_timer(state)
        logger.debug("Task stopped id=%s", task_id)

    def set_enabled(self, task_id: str, enabled: bool) -> None:
        """Pause or resume the loop without dropping the task's bookkeeping."""
        state = self._state(task_id)
        state.enabled = bool(enabled)

        if not state.enabled:
            self._clear_timer(state)
            return

        if not state.executing and state.timer is None and not state.cycles:
            self._spawn(state)

    def stop_all(self) -> None:
        for task_id in list(self._states):
            self.stop(task_id)

    async def aclose(self) -> None:
        """Stop every task and wait for in-flight cycles (their results are discarded)."""
        self.stop_all()
        pending = [c for s in self._states.values() for c in s.cycles]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ---- introspection ----

    def is_scheduled(self, task_id: str) -> bool:
        return task_id in self._states

    def is_executing(self, task_id: str) -> bool:
        state = self._states.get(task_id)
        return bool(state and state.executing)

    def is_enabled(self, task_id: str) -> bool:
        return self._state(task_id).enabled

    def has_timer(self, task_id: str) -> bool:
        return self._state(task_id).timer is not None

    def last_delay(self, task_id: str) -> float | None:
        return self._state(task_id).last_delay

    def run_count(self, task_id: str) -> int:
        return self._state(task_id).runs

    async def wait_idle(self, task_id: str) -> None:
        """Wait until no cycle of `task_id` is running or about to start."""
        state = self._state(task_id)
        while state.cycles or state.executing:
            if state.cycles:
                await asyncio.gather(*list(state.cycles), return_exceptions=True)
            else:
                await state.idle.wait()

    def add_listener(self, listener: ExecutingListener) -> Callable[[], None]:
        """Get notified with (task_id, executing) whenever a task starts/finishes executing."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- internals ----

    def _state(self, task_id: str) -> RunState:
        try:
            return self._states[task_id]
        except KeyError:
            raise KeyError(f"Unknown task {task_id!r}") from None

    def _notify(self, task_id: str, executing: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(task_id, executing)
            except Exception:
                logger.exception("Executing listener failed task_id=%s", task_id)

    def _clear_timer(self, state: RunState) -> None:
        if state.timer is not None:
            state.timer.cancel()
            state.timer = None

    def _spawn(self, state: RunState) -> asyncio.Task[None]:
        loop = asyncio.get_running_loop()
        cycle = loop.create_task(self._run_cycle(state), name=f"poll:{state.task.id}")
        state.cycles.add(cycle)
        cycle.add_done_callback(state.cycles.discard)
        return cycle

    def _on_timer(self, state: RunState) -> None:
        state.timer = None
        if state.enabled:
            self._spawn(state)

    def _arm(self, state: RunState, delay: float) -> None:
        self._clear_timer(state)
        state.last_delay = delay
        loop = asyncio.get_running_loop()
        state.timer = loop.call_later(delay, self._on_timer, state)

    def _next_delay(self, state: RunState, result: Any, error: Exception | None) -> float:
        try:
            return max(0.0, float(state.task.get_interval(result, error)))
        except Exception:
            logger.exception("Interval function failed task_id=%s", state.task.id)
            if state.last_delay is not None:
                return state.last_delay
            return self._fallback_delay

    async def _run_cycle(self, state: RunState) -> None:
        task = state.task
        if not state.enabled or state.executing:
            return

        state.executing = True
        state.idle.clear()
        self._notify(task.id, True)

        result: Any = None
        error: Exception | None = None
        try:
            result = await task.execute()
        except Exception as exc:
            error = exc
        finally:
            state.executing = False
            state.idle.set()
            self._notify(task.id, False)

        if not state.enabled:
            logger.debug("Task %s disabled while executing; result discarded", task.id)
            return

        state.runs += 1

        if error is None:
            if task.on_result is not None:
                try:
                    task.on_result(result)
                except Exception:
                    logger.exception("on_result failed task_id=%s", task.id)
        else:
            logger.debug("Task %s failed: %r", task.id, error)
            if task.on_error is not None:
                try:
                    task.on_error(error)
                except Exception:
                    logger.exception("on_error failed task_id=%s", task.id)

        # A callback may have stopped the task.
        if not state.enabled:
            return

        delay = self._next_delay(state, result, error)
        self._arm(state, delay)
        logger.debug("Task %s next run in %.2fs", task.id, delay)
