# src/lol_toolkit/core/state.py

"""
Explicit state containers.

Every asynchronous continuation reads the current value through `get()` at the
point of use. Nothing should capture a value at schedule time and trust it later.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .events import EventBus

T = TypeVar("T")

Listener = Callable[[T, T], None]

logger = logging.getLogger(__name__)


class StateCell(Generic[T]):
    """Single mutable value with change notifications (new, old)."""

    __slots__ = ("_name", "_value", "_listeners")

    def __init__(self, initial: T, *, name: str = "cell") -> None:
        self._name = name
        self._value = initial
        self._listeners: list[Listener[T]] = []

    @property
    def name(self) -> str:
        return self._name

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Store `value`. Returns True (and notifies) only if it differs from the current one."""
        old = self._value
        if value == old:
            return False
        self._value = value

        for listener in list(self._listeners):
            try:
                listener(value, old)
            except Exception:
                logger.exception("State listener failed cell=%s", self._name)
        return True

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def __repr__(self) -> str:
        return f"StateCell({self._name}={self._value!r})"


@dataclass
class AppState:
    """Everything the CLI and its commands need, wired once by the bootstrap."""

    settings: object
    events: EventBus
    client: Any
    service: Any
    api_log: deque[Any] = field(default_factory=lambda: deque(maxlen=50))
    runner: Any = None
