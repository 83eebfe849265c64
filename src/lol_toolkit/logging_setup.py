# src/lol_toolkit/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "lol-toolkit.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Minimum console level per logger prefix; first match wins.
# The transport logs every request, pollers log every cycle: fine for the file,
# too much for a REPL.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("lol_toolkit.lcu.", logging.WARNING),
    ("lol_toolkit.tasks.", logging.WARNING),
    ("lol_toolkit.", logging.NOTSET),
)
_THIRD_PARTY_FLOOR = logging.ERROR


class _ConsoleFloorFilter(logging.Filter):
    """Drop console records below the floor configured for their logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name.startswith(prefix):
                return record.levelno >= floor
        # aiohttp, asyncio, py.warnings
        return record.levelno >= _THIRD_PARTY_FLOOR


def setup_logging(
    *,
    log_dir: str | Path = ".local/lol-toolkit",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console (stderr, filtered) plus a full log file under `log_dir`.

    Replaces any handlers already on the root logger, so it is safe to call again.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleFloorFilter())

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(min(console_level, file_level))
    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.captureWarnings(True)
    for noisy in ("aiohttp", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.INFO)

    return log_file
