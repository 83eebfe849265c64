# src/lol_toolkit/sync/intervals.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class PollingIntervals:
    """
    Delays (seconds) used by the status, summoner and auto-accept tasks.

    Disconnected checks are short so a starting client is noticed quickly;
    a connected client only needs periodic confirmation.
    """

    status_disconnected: float = 10.0
    status_connected: float = 30.0
    summoner_initial: float = 5.0
    summoner_refresh: float = 60.0
    push_debounce: float = 0.5

    # auto-accept: very fast once a match is found, fast in queue, slow otherwise
    auto_accept_match_found: float = 0.2
    auto_accept_in_queue: float = 0.5
    auto_accept_idle: float = 3.0
    # consecutive "no ready check" answers before falling back to the idle rate
    auto_accept_miss_limit: int = 5

    @classmethod
    def from_settings(cls, settings) -> PollingIntervals:
        defaults = cls()
        return cls(
            status_disconnected=float(getattr(settings, "status_interval_disconnected", defaults.status_disconnected)),
            status_connected=float(getattr(settings, "status_interval_connected", defaults.status_connected)),
            summoner_initial=float(getattr(settings, "summoner_interval_initial", defaults.summoner_initial)),
            summoner_refresh=float(getattr(settings, "summoner_interval_refresh", defaults.summoner_refresh)),
            push_debounce=float(getattr(settings, "push_debounce_seconds", defaults.push_debounce)),
            auto_accept_match_found=float(
                getattr(settings, "auto_accept_interval_match_found", defaults.auto_accept_match_found)
            ),
            auto_accept_in_queue=float(getattr(settings, "auto_accept_interval_in_queue", defaults.auto_accept_in_queue)),
            auto_accept_idle=float(getattr(settings, "auto_accept_interval_idle", defaults.auto_accept_idle)),
            auto_accept_miss_limit=int(getattr(settings, "auto_accept_miss_limit", defaults.auto_accept_miss_limit)),
        )
