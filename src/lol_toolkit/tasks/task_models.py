# src/lol_toolkit/tasks/task_models.py

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True, eq=False)
class PollingTask(Generic[T]):
    """
    One repeatable asynchronous operation.

    get_interval receives the (result, error) pair of the cycle that just finished
    and returns the delay in seconds until the next automatic run.
    """

    id: str
    execute: Callable[[], Awaitable[T]]
    get_interval: Callable[[T | None, Exception | None], float]
    on_result: Callable[[T], None] | None = None
    on_error: Callable[[Exception], None] | None = None
    enabled: bool = True


@dataclass(slots=True, eq=False)
class RunState:
    """Per-task bookkeeping, owned exclusively by one TaskScheduler."""

    task: PollingTask[Any]
    enabled: bool
    executing: bool = False
    timer: asyncio.TimerHandle | None = None
    last_delay: float | None = None
    runs: int = 0
    idle: asyncio.Event = field(default_factory=asyncio.Event)
    cycles: set[asyncio.Task[None]] = field(default_factory=set)
