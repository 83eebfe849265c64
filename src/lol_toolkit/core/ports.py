# src/lol_toolkit/core/ports.py

"""
Ports (interfaces) used by the sync core.

The core depends on Protocols instead of the concrete LCU client.
This keeps the transport swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Awaitable, Protocol

from .models import CurrentSummoner, LcuStatus, ReadyCheck


class StatusSource(Protocol):
    """Pull operation: is the local client reachable right now?"""

    def get_status(self) -> Awaitable[LcuStatus]: ...


class SummonerSource(Protocol):
    """Pull operation for data that only exists while connected."""

    def get_current_summoner(self) -> Awaitable[CurrentSummoner]: ...


class MatchmakingSource(Protocol):
    """What auto-accept needs: the gameflow phase, the ready check, and a way to accept it."""

    def get_gameflow_phase(self) -> Awaitable[str]: ...

    def get_ready_check(self) -> Awaitable[ReadyCheck]: ...

    def accept_match(self) -> Awaitable[None]: ...


class PushChannel(Protocol):
    """Named event stream. `on` returns an unsubscribe callable."""

    def on(self, name: str, handler: Callable[[Any], None]) -> Callable[[], None]: ...


class StatusSink(Protocol):
    """What the push bridge needs from the connection tracker."""

    @property
    def connected(self) -> bool: ...

    def apply_status(self, status: LcuStatus) -> None: ...
