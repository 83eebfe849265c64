# src/lol_toolkit/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.events import AUTO_ACCEPT_STOPPED_EVENT
from ..core.models import SyncSnapshot
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class _ConnectionAnnouncer:
    """Prints a line when the connection state or the summoner changes."""

    def __init__(self) -> None:
        self._last: tuple[str, str | None] | None = None

    def __call__(self, snap: SyncSnapshot) -> None:
        key = (snap.state.value, snap.summoner.puuid if snap.summoner else None)
        if key == self._last:
            return
        self._last = key

        if snap.summoner is not None:
            _print_ts(f"[LCU] {snap.state.value}, summoner {snap.summoner.riot_id}")
        else:
            _print_ts(f"[LCU] {snap.state.value}")


def _announce_auto_accept_stopped(payload) -> None:
    reason = payload.get("reason") if isinstance(payload, dict) else None
    _print_ts(f"[LCU] Auto-accept turned off ({reason or 'unknown reason'}). Use /autoaccept on to re-enable.")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    unsubscribe = state.service.subscribe(_ConnectionAnnouncer())
    unwatch_auto_accept = state.events.on(AUTO_ACCEPT_STOPPED_EVENT, _announce_auto_accept_stopped)

    def emit(text: str) -> None:
        # Immediate user-visible feedback for slow commands (/refresh).
        _print_ts(text)

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                response = command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                response = "Commands start with '/'. Use /help to list them."
            _print_ts(response)
    finally:
        unsubscribe()
        unwatch_auto_accept()

    logger.info("Console connector finished.")
