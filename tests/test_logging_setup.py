# tests/test_logging_setup.py

from __future__ import annotations

import logging

from lol_toolkit.logging_setup import _ConsoleFloorFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_transport_and_third_party_quiet() -> None:
    f = _ConsoleFloorFilter()

    assert f.filter(_record("lol_toolkit.sync.service", logging.INFO))
    assert not f.filter(_record("lol_toolkit.lcu.client", logging.INFO))
    assert f.filter(_record("lol_toolkit.lcu.client", logging.WARNING))
    assert not f.filter(_record("lol_toolkit.tasks.task_scheduler", logging.DEBUG))
    assert not f.filter(_record("aiohttp.client", logging.WARNING))
    assert f.filter(_record("aiohttp.client", logging.ERROR))


def test_setup_logging_writes_the_log_file(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("lol_toolkit.lcu.client").debug("GET /x -> 200")
        for handler in root.handlers:
            handler.flush()

        assert log_file == tmp_path / "logs" / "lol-toolkit.log"
        assert "GET /x -> 200" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
