# src/lol_toolkit/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time: every key has a working default.
- Intervals are seconds; the defaults match the League client's behaviour
  (fast checks while disconnected, slow ones while connected).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "LOLTK"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Connectors ----
    console_enabled: bool

    # ---- League client API ----
    lcu_host: str
    lcu_lockfile_path: Optional[Path]
    lcu_request_timeout: float
    lcu_connection_cache_ttl: float

    # ---- Polling intervals (seconds) ----
    status_interval_disconnected: float
    status_interval_connected: float
    summoner_interval_initial: float
    summoner_interval_refresh: float
    push_debounce_seconds: float

    # ---- Auto-accept ----
    auto_accept_enabled: bool

    # ---- Diagnostics ----
    api_log_size: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "lol-toolkit") or "lol-toolkit"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/lol-toolkit")) or Path(".local/lol-toolkit")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        lcu_host = _env(_k("LCU_HOST"), "127.0.0.1").strip() or "127.0.0.1"
        lcu_lockfile_path = _env_path(_k("LCU_LOCKFILE"), None)
        lcu_request_timeout = _env_float(_k("LCU_REQUEST_TIMEOUT"), 5.0, minimum=0.1)
        lcu_connection_cache_ttl = _env_float(_k("LCU_CONNECTION_CACHE_TTL"), 30.0)

        status_interval_disconnected = _env_float(_k("STATUS_INTERVAL_DISCONNECTED"), 10.0, minimum=0.1)
        status_interval_connected = _env_float(_k("STATUS_INTERVAL_CONNECTED"), 30.0, minimum=0.1)
        summoner_interval_initial = _env_float(_k("SUMMONER_INTERVAL_INITIAL"), 5.0, minimum=0.1)
        summoner_interval_refresh = _env_float(_k("SUMMONER_INTERVAL_REFRESH"), 60.0, minimum=0.1)
        push_debounce_seconds = _env_float(_k("PUSH_DEBOUNCE"), 0.5)

        auto_accept_enabled = _env_bool(_k("AUTO_ACCEPT"), False)

        api_log_size = max(1, _env_int(_k("API_LOG_SIZE"), 50))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            console_enabled=console_enabled,
            lcu_host=lcu_host,
            lcu_lockfile_path=lcu_lockfile_path,
            lcu_request_timeout=lcu_request_timeout,
            lcu_connection_cache_ttl=lcu_connection_cache_ttl,
            status_interval_disconnected=status_interval_disconnected,
            status_interval_connected=status_interval_connected,
            summoner_interval_initial=summoner_interval_initial,
            summoner_interval_refresh=summoner_interval_refresh,
            push_debounce_seconds=push_debounce_seconds,
            auto_accept_enabled=auto_accept_enabled,
            api_log_size=api_log_size,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for a couple of safe switches.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "CONSOLE_ENABLED"):
        object.__setattr__(SETTINGS, "console_enabled", bool(_config_local.CONSOLE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "LCU_LOCKFILE"):
        object.__setattr__(SETTINGS, "lcu_lockfile_path", Path(_config_local.LCU_LOCKFILE))  # type: ignore[misc]
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
