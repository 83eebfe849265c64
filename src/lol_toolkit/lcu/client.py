# src/lol_toolkit/lcu/client.py

"""
League client (LCU) API client.

Talks HTTPS to 127.0.0.1 with the client's self-signed certificate (verification
off) and basic auth `riot:<token>`. Every call is published as an `api-call`
event so diagnostics can show what was requested and how it went.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..core.events import API_CALL_EVENT, EventBus
from ..core.models import CurrentSummoner, LcuStatus, ReadyCheck
from .connection import ConnectionLocator
from .errors import ClientNotRunningError, LcuApiError, LcuError
from .status_monitor import STATUS_ENDPOINT, ConnectionStatusMonitor

logger = logging.getLogger(__name__)

CURRENT_SUMMONER_ENDPOINT = "/lol-summoner/v1/current-summoner"
GAMEFLOW_PHASE_ENDPOINT = "/lol-gameflow/v1/gameflow-phase"
READY_CHECK_ENDPOINT = "/lol-matchmaking/v1/ready-check"
ACCEPT_MATCH_ENDPOINT = "/lol-matchmaking/v1/ready-check/accept"
NOT_RUNNING_MESSAGE = "League client not running"
MAX_LOGGED_RESPONSE = 2000


def basic_auth_header(token: str) -> str:
    """`Authorization` value for the client API: basic auth with user `riot`."""
    raw = f"riot:{token}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


@dataclass(slots=True, frozen=True)
class ApiCallLog:
    method: str
    endpoint: str
    status_code: int
    duration_ms: int
    error: str | None = None
    response: str | None = None
    type: str = "lcu"

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300


class LcuClient:
    def __init__(
        self,
        locator: ConnectionLocator,
        monitor: ConnectionStatusMonitor,
        events: EventBus | None = None,
        *,
        host: str = "127.0.0.1",
        timeout_seconds: float = 5.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._locator = locator
        self._monitor = monitor
        self._events = events
        self._host = host
        self._timeout = aiohttp.ClientTimeout(total=max(0.1, float(timeout_seconds)))
        self._session = session
        self._owns_session = session is None

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    def _publish(self, entry: ApiCallLog) -> None:
        if entry.ok:
            logger.debug("%s %s -> %s (%dms)", entry.method, entry.endpoint, entry.status_code, entry.duration_ms)
        else:
            logger.debug(
                "%s %s -> %s (%dms) error=%s",
                entry.method,
                entry.endpoint,
                entry.status_code,
                entry.duration_ms,
                entry.error,
            )
        if self._events is not None:
            self._events.emit(API_CALL_EVENT, entry)

    async def get_status(self) -> LcuStatus:
        """Check whether the client is running. Never raises."""
        start = time.monotonic()
        info = await self._locator.get()
        duration_ms = int((time.monotonic() - start) * 1000)

        self._monitor.set_connected(info is not None)

        if info is None:
            status = LcuStatus.disconnected(NOT_RUNNING_MESSAGE)
            self._publish(ApiCallLog("GET", STATUS_ENDPOINT, 500, duration_ms, error=NOT_RUNNING_MESSAGE))
            return status

        self._publish(ApiCallLog("GET", STATUS_ENDPOINT, 200, duration_ms))
        return LcuStatus(connected=True, port=info.port, auth_token=info.auth_token)

    async def get_current_summoner(self) -> CurrentSummoner:
        data = await self.request("GET", CURRENT_SUMMONER_ENDPOINT)
        try:
            return CurrentSummoner.from_payload(data)
        except ValueError as exc:
            raise LcuError(f"failed to parse summoner: {exc}") from exc

    async def get_gameflow_phase(self) -> str:
        """Raw gameflow phase name, e.g. "Lobby", "Matchmaking", "ReadyCheck"."""
        data = await self.request("GET", GAMEFLOW_PHASE_ENDPOINT)
        if not isinstance(data, str):
            raise LcuError(f"unexpected gameflow phase payload: {data!r}")
        return data

    async def get_ready_check(self) -> ReadyCheck:
        data = await self.request("GET", READY_CHECK_ENDPOINT)
        # The client answers "None" or null when there is no ready check.
        if data is None or data == "None":
            raise LcuApiError(404, "", reason="ready check not available")
        try:
            return ReadyCheck.from_payload(data)
        except ValueError as exc:
            raise LcuError(f"failed to parse ready check: {exc}") from exc

    async def accept_match(self) -> None:
        await self.request("POST", ACCEPT_MATCH_ENDPOINT)

    async def request(self, method: str, endpoint: str, *, payload: Any = None) -> Any:
        """Perform one API call and return the decoded JSON body (None for empty bodies)."""
        start = time.monotonic()
        status_code = 0
        error: str | None = None
        body = ""

        try:
            info = await self._locator.get()
            if info is None:
                raise ClientNotRunningError("league client not running")

            session = self._get_session()
            async with session.request(
                method,
                f"{info.base_url(self._host)}{endpoint}",
                headers={
                    "Authorization": basic_auth_header(info.auth_token),
                    "Accept": "application/json",
                },
                json=payload,
                ssl=False,
            ) as resp:
                status_code = resp.status
                body = await resp.text()
                if not 200 <= resp.status < 300:
                    raise LcuApiError(resp.status, body, reason=resp.reason or "")

            if not body:
                return None
            try:
                return json.loads(body)
            except json.JSONDecodeError as exc:
                raise LcuError(f"invalid JSON from {endpoint}: {exc}") from exc

        except LcuError as exc:
            error = str(exc)
            if isinstance(exc, ClientNotRunningError):
                self._monitor.handle_connection_error(exc, endpoint)
            raise
        except (aiohttp.ClientError, TimeoutError, OSError) as exc:
            error = str(exc) or exc.__class__.__name__
            self._locator.clear_cache()
            self._monitor.handle_connection_error(exc, endpoint)
            raise LcuError(f"request {method} {endpoint} failed: {error}") from exc
        finally:
            self._publish(
                ApiCallLog(
                    method=method,
                    endpoint=endpoint,
                    status_code=status_code or 500,
                    duration_ms=int((time.monotonic() - start) * 1000),
                    error=error,
                    response=body[:MAX_LOGGED_RESPONSE] or None,
                )
            )
