# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio

import pytest

from lol_toolkit.tasks.task_models import PollingTask
from lol_toolkit.tasks.task_scheduler import TaskScheduler


class CountingOp:
    """Async operation that counts calls and can be held in flight with a gate."""

    def __init__(self, results=None) -> None:
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.results = list(results or [])
        self.gate: asyncio.Event | None = None

    async def __call__(self):
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
        finally:
            self.in_flight -= 1
        item = self.results.pop(0) if self.results else "ok"
        if isinstance(item, Exception):
            raise item
        return item


@pytest.mark.asyncio
async def test_first_cycle_runs_immediately_and_arms_one_timer() -> None:
    op = CountingOp()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 60.0))

    await scheduler.wait_idle("t")

    assert op.calls == 1
    assert scheduler.last_delay("t") == 60.0
    assert scheduler.has_timer("t")
    assert scheduler.run_count("t") == 1

    await scheduler.aclose()
    assert not scheduler.has_timer("t")


@pytest.mark.asyncio
async def test_refresh_runs_now_instead_of_waiting_for_timer() -> None:
    op = CountingOp()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 60.0))
    await scheduler.wait_idle("t")

    await scheduler.refresh("t")

    assert op.calls == 2
    # Re-armed from the fresh result.
    assert scheduler.has_timer("t")
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_in_flight_guard_absorbs_concurrent_refreshes() -> None:
    op = CountingOp()
    op.gate = asyncio.Event()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 60.0))
    await asyncio.sleep(0)
    assert scheduler.is_executing("t")

    refreshes = [asyncio.create_task(scheduler.refresh("t")) for _ in range(3)]
    await asyncio.gather(*refreshes)
    assert op.calls == 1

    op.gate.set()
    await scheduler.wait_idle("t")

    assert op.calls == 1
    assert op.max_in_flight == 1
    assert scheduler.has_timer("t")
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_failures_keep_the_loop_alive_and_reach_the_interval_function() -> None:
    boom = RuntimeError("boom")
    op = CountingOp(results=[boom, "ok"])
    seen: list[tuple[object, object]] = []
    errors: list[Exception] = []

    def interval(result, error) -> float:
        seen.append((result, error))
        return 0.01 if error is not None else 60.0

    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=interval, on_error=errors.append))

    await asyncio.sleep(0.1)
    await scheduler.wait_idle("t")

    assert op.calls == 2
    assert errors == [boom]
    assert seen == [(None, boom), ("ok", None)]
    assert scheduler.last_delay("t") == 60.0
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_stop_cancels_timer_and_discards_in_flight_result() -> None:
    op = CountingOp()
    op.gate = asyncio.Event()
    results: list[object] = []
    scheduler = TaskScheduler()
    scheduler.schedule(
        PollingTask(id="t", execute=op, get_interval=lambda r, e: 0.01, on_result=results.append)
    )
    await asyncio.sleep(0)

    scheduler.stop("t")
    op.gate.set()
    await scheduler.wait_idle("t")
    await asyncio.sleep(0.05)

    assert results == []
    assert op.calls == 1
    assert not scheduler.has_timer("t")


@pytest.mark.asyncio
async def test_set_enabled_pauses_and_resumes() -> None:
    op = CountingOp()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 60.0))
    await scheduler.wait_idle("t")

    scheduler.set_enabled("t", False)
    assert not scheduler.has_timer("t")
    await scheduler.refresh("t")
    assert op.calls == 1

    scheduler.set_enabled("t", True)
    await scheduler.wait_idle("t")
    assert op.calls == 2
    assert scheduler.has_timer("t")
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_disabled_task_never_runs() -> None:
    op = CountingOp()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 1.0, enabled=False))
    await asyncio.sleep(0)
    await scheduler.refresh("t")

    assert op.calls == 0
    assert not scheduler.has_timer("t")


@pytest.mark.asyncio
async def test_callback_and_interval_failures_are_absorbed() -> None:
    op = CountingOp()

    def bad_result(_result) -> None:
        raise ValueError("callback bug")

    def bad_interval(_result, _error) -> float:
        raise ValueError("interval bug")

    scheduler = TaskScheduler(fallback_delay=30.0)
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=bad_interval, on_result=bad_result))
    await scheduler.wait_idle("t")

    assert scheduler.last_delay("t") == 30.0
    assert scheduler.has_timer("t")
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_duplicate_task_id_is_rejected() -> None:
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=CountingOp(), get_interval=lambda r, e: 60.0))

    with pytest.raises(ValueError):
        scheduler.schedule(PollingTask(id="t", execute=CountingOp(), get_interval=lambda r, e: 60.0))
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_listeners_see_executing_transitions() -> None:
    seen: list[tuple[str, bool]] = []
    scheduler = TaskScheduler()
    scheduler.add_listener(lambda task_id, executing: seen.append((task_id, executing)))
    scheduler.schedule(PollingTask(id="t", execute=CountingOp(), get_interval=lambda r, e: 60.0))
    await scheduler.wait_idle("t")

    assert seen == [("t", True), ("t", False)]
    await scheduler.aclose()


@pytest.mark.asyncio
async def test_aclose_waits_for_a_cycle_started_by_refresh() -> None:
    op = CountingOp()
    scheduler = TaskScheduler()
    scheduler.schedule(PollingTask(id="t", execute=op, get_interval=lambda r, e: 60.0))
    await scheduler.wait_idle("t")

    op.gate = asyncio.Event()
    manual = asyncio.create_task(scheduler.refresh("t"))
    await asyncio.sleep(0.01)
    assert scheduler.is_executing("t")

    closing = asyncio.create_task(scheduler.aclose())
    await asyncio.sleep(0.01)
    assert not closing.done()

    op.gate.set()
    await closing
    await manual

    assert not scheduler.is_executing("t")
    assert not scheduler.is_enabled("t")
    assert not scheduler.has_timer("t")
    assert op.calls == 2
