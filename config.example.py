# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LOLTK_APP_NAME": "App display name (default: lol-toolkit).",
    "LOLTK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "LOLTK_DATA_DIR": "Local data directory for logs (default: .local/lol-toolkit).",
    # Connectors
    "LOLTK_CONSOLE_ENABLED": "Run the interactive console (true/false).",
    # League client API
    "LOLTK_LCU_HOST": "Host of the local client API (default: 127.0.0.1).",
    "LOLTK_LCU_LOCKFILE": "Optional path to the client's lockfile (skips process scanning).",
    "LOLTK_LCU_REQUEST_TIMEOUT": "Per-request timeout in seconds (default: 5).",
    "LOLTK_LCU_CONNECTION_CACHE_TTL": "How long discovered port/token are reused, seconds (default: 30).",
    # Polling (seconds)
    "LOLTK_STATUS_INTERVAL_DISCONNECTED": "Status check interval while disconnected (default: 10).",
    "LOLTK_STATUS_INTERVAL_CONNECTED": "Status check interval while connected (default: 30).",
    "LOLTK_SUMMONER_INTERVAL_INITIAL": "Summoner retry interval until it is loaded (default: 5).",
    "LOLTK_SUMMONER_INTERVAL_REFRESH": "Summoner refresh interval once loaded (default: 60).",
    "LOLTK_PUSH_DEBOUNCE": "Debounce window for pushed status changes (default: 0.5).",
    # Auto-accept
    "LOLTK_AUTO_ACCEPT": "Accept ready checks automatically from start-up (true/false, default: false).",
    # Diagnostics
    "LOLTK_API_LOG_SIZE": "How many recent API calls /calls keeps (default: 50).",
}
