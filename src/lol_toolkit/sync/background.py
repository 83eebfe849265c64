# src/lol_toolkit/sync/background.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.state import AppState

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SyncBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def submit(self, coro: Coroutine[Any, Any, T], *, timeout: float | None = 15.0) -> T:
        """Run `coro` on the sync loop and block until it finishes."""
        fut = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return fut.result(timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal sync stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


async def run_sync(state: AppState, stop_event: asyncio.Event) -> None:
    """Start the service, wait for the stop signal, then tear everything down."""
    service = state.service
    try:
        await service.start()
        await stop_event.wait()
    finally:
        await service.stop()
        close = getattr(state.client, "close", None)
        if close is not None:
            try:
                await close()
            except Exception:
                logger.debug("Client close failed.", exc_info=True)


def start_sync_in_background(state: AppState) -> SyncBackgroundRunner | None:
    """
    Run the sync service in a background thread with its own event loop.

    The console REPL blocks on input(), so it keeps the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(run_sync(state, stop_event))
        except Exception:
            logger.exception("Sync loop crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.run_until_complete(loop.shutdown_asyncgens())
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="lcu-sync", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Sync thread did not initialize properly.")
        return None

    logger.info("Sync background thread started.")
    runner_obj = SyncBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
    state.runner = runner_obj
    return runner_obj
