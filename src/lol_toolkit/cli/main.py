# src/lol_toolkit/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then:
- runs the LCU sync service in a background thread (own event loop),
- runs the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..sync.background import start_sync_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    runner = start_sync_in_background(state)
    if runner is None:
        logger.error("Could not start the LCU sync service.")
        return

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    # With the console on, Ctrl+C must still interrupt input(), so only SIGTERM is routed.
    routed = [signal.SIGTERM] if settings.console_enabled else [signal.SIGINT, signal.SIGTERM]
    for signum in routed:
        try:
            signal.signal(signum, _handle_signal)
        except (ValueError, OSError):
            # Some platforms do not support SIGTERM.
            pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Syncing in the background. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        runner.stop()
        runner.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
