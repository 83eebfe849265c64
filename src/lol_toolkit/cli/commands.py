# src/lol_toolkit/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.models import ConnectionState
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /status, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def _auto_accept_label(enabled: bool, client_state) -> str:
    if not enabled:
        return "off"
    if client_state is None:
        return "on"
    return f"on ({client_state.value.replace('_', ' ')})"


def cmd_status(state: AppState, args: list[str]) -> str:
    snap = state.service.snapshot()
    status = snap.status

    if snap.state == ConnectionState.UNKNOWN:
        conn = "checking..." if snap.loading else "unknown"
    elif snap.state == ConnectionState.CONNECTED:
        conn = f"connected (port {status.port or '?'})"
    else:
        conn = f"disconnected ({status.error or 'no reason'})"

    summoner = snap.summoner.riot_id if snap.summoner is not None else "-"
    auto_accept = _auto_accept_label(snap.auto_accept, snap.client_state) if state.service.auto_accept is not None else "n/a"
    return (
        "Status:\n"
        f"  League client: {conn}\n"
        f"  Summoner: {summoner}\n"
        f"  Polling: {'yes' if snap.is_polling else 'no'}\n"
        f"  Auto-accept: {auto_accept}\n"
        f"  Error: {snap.error or '-'}"
    )


def cmd_summoner(state: AppState, args: list[str]) -> str:
    s = state.service.summoner
    if s is None:
        if state.service.connection_state != ConnectionState.CONNECTED:
            return "League client is not connected."
        return "Summoner not loaded yet."

    return (
        f"Summoner {s.riot_id}\n"
        f"  Level: {s.summoner_level} ({s.percent_complete_for_next_level}% to next)\n"
        f"  XP: {s.xp_since_last_level}/{s.xp_since_last_level + s.xp_until_next_level}\n"
        f"  Icon: {s.profile_icon_id}\n"
        f"  Reroll points: {s.reroll_points.current_points}\n"
        f"  PUUID: {s.puuid}"
    )


def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    runner = state.runner
    if runner is None:
        return "Sync is not running."

    if emit:
        emit("[LCU] Refreshing...")

    try:
        runner.submit(state.service.refresh())
    except Exception:
        logger.exception("Manual refresh failed.")
        return "Refresh failed (see log)."
    return cmd_status(state, [])


def cmd_autoaccept(state: AppState, args: list[str]) -> str:
    """
    /autoaccept         -> show whether ready checks are accepted automatically
    /autoaccept on|off  -> switch it
    """
    poller = state.service.auto_accept
    if poller is None:
        return "Auto-accept is not available."

    if not args:
        label = _auto_accept_label(poller.enabled.get(), poller.client_state.get())
        return f"Auto-accept: {label} (accepted {poller.accepted})"

    choice = args[0].lower()
    if choice not in ("on", "off"):
        return "Usage: /autoaccept on|off"

    runner = state.runner
    if runner is None:
        return "Sync is not running."

    try:
        runner.submit(state.service.set_auto_accept(choice == "on"))
    except Exception:
        logger.exception("Switching auto-accept failed.")
        return "Could not switch auto-accept (see log)."
    return f"Auto-accept {choice}."


def cmd_calls(state: AppState, args: list[str]) -> str:
    """
    /calls        -> show recent LCU API calls
    /calls clear  -> forget them
    """
    if args and args[0].lower() == "clear":
        state.api_log.clear()
        return "API call log cleared."

    if not state.api_log:
        return "No API calls recorded yet."

    lines = [f"Recent API calls ({len(state.api_log)}):"]
    for entry in list(state.api_log)[:20]:
        mark = "ok " if entry.ok else "ERR"
        tail = f" - {entry.error}" if entry.error else ""
        lines.append(
            f"  {mark} {entry.method} {entry.endpoint} -> {entry.status_code} ({entry.duration_ms}ms){tail}"
        )
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show League client connection status.")
registry.register("summoner", cmd_summoner, help_text="Show the logged-in summoner.", aliases=["me"])
registry.register("refresh", cmd_refresh, help_text="Re-check status and summoner now.")
registry.register(
    "autoaccept",
    cmd_autoaccept,
    help_text="Accept ready checks automatically: /autoaccept [on|off].",
    aliases=["aa"],
)
registry.register("calls", cmd_calls, help_text="Recent LCU API calls: /calls | /calls clear.")
