# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from lol_toolkit.cli.bootstrap import create_initial_state
from lol_toolkit.core.events import EventBus
from lol_toolkit.core.state import AppState
from lol_toolkit.sync.intervals import PollingIntervals


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="lol-toolkit-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        console_enabled=False,
        lcu_host="127.0.0.1",
        lcu_lockfile_path=None,
        lcu_request_timeout=1.0,
        lcu_connection_cache_ttl=30.0,
        status_interval_disconnected=60.0,
        status_interval_connected=120.0,
        summoner_interval_initial=15.0,
        summoner_interval_refresh=90.0,
        push_debounce_seconds=0.05,
        auto_accept_enabled=False,
        api_log_size=10,
    )


@pytest.fixture()
def intervals() -> PollingIntervals:
    """
    Intervals long enough that no timer fires during a test.

    Tests drive cycles explicitly (refresh / poll_status) and only rely on
    real time for the short push debounce.
    """
    return PollingIntervals(
        status_disconnected=60.0,
        status_connected=120.0,
        summoner_initial=15.0,
        summoner_refresh=90.0,
        push_debounce=0.05,
    )


@pytest.fixture()
def events() -> EventBus:
    return EventBus()


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired by the real bootstrap.

    Nothing is started: no background loop, no LCU requests.
    """
    return create_initial_state(settings=settings)
