# tests/test_lcu_client.py

from __future__ import annotations

import base64
import socket

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from lol_toolkit.core.events import API_CALL_EVENT, STATUS_CHANGED_EVENT
from lol_toolkit.core.models import ConnectionState
from lol_toolkit.lcu.client import (
    ACCEPT_MATCH_ENDPOINT,
    CURRENT_SUMMONER_ENDPOINT,
    GAMEFLOW_PHASE_ENDPOINT,
    READY_CHECK_ENDPOINT,
    ApiCallLog,
    LcuClient,
    basic_auth_header,
)
from lol_toolkit.lcu.connection import ConnectionLocator
from lol_toolkit.lcu.errors import LcuApiError, LcuError
from lol_toolkit.lcu.status_monitor import STATUS_ENDPOINT, ConnectionStatusMonitor, is_connection_refused_error

TOKEN = "s3cret"

SUMMONER_PAYLOAD = {
    "puuid": "p-1",
    "summonerId": 11,
    "accountId": 22,
    "gameName": "Faker",
    "tagLine": "KR1",
    "displayName": "Faker",
    "summonerLevel": 512,
    "profileIconId": 6,
    "rerollPoints": {"currentPoints": 100, "maxRolls": 2, "numberOfRolls": 1, "pointsCostToRoll": 250},
}


def write_lockfile(tmp_path, port: int) -> ConnectionLocator:
    lockfile = tmp_path / "lockfile"
    lockfile.write_text(f"LeagueClient:1:{port}:{TOKEN}:http", encoding="utf-8")

    async def no_process() -> str:
        return ""

    return ConnectionLocator(lockfile_path=lockfile, read_commandline=no_process)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def collect(events, name: str) -> list:
    seen: list = []
    events.on(name, seen.append)
    return seen


# ---- status monitor ----


def test_monitor_emits_only_on_change(events) -> None:
    pushed = collect(events, STATUS_CHANGED_EVENT)
    monitor = ConnectionStatusMonitor(events)

    assert monitor.state == ConnectionState.UNKNOWN
    assert monitor.is_connected()

    assert monitor.set_connected(True)
    assert not monitor.set_connected(True)
    assert monitor.set_connected(False)
    assert not monitor.is_connected()

    assert pushed == [{"connected": True}, {"connected": False}]


def test_status_endpoint_errors_never_flip_the_monitor(events) -> None:
    pushed = collect(events, STATUS_CHANGED_EVENT)
    monitor = ConnectionStatusMonitor(events)

    assert not monitor.handle_connection_error(ConnectionRefusedError(), STATUS_ENDPOINT)
    assert monitor.handle_connection_error(ConnectionRefusedError(), CURRENT_SUMMONER_ENDPOINT)
    assert not monitor.handle_connection_error(ValueError("bad json"), CURRENT_SUMMONER_ENDPOINT)

    assert pushed == [{"connected": False}]


@pytest.mark.parametrize(
    "message, refused",
    [
        ("dial tcp 127.0.0.1:1234: connectex: No connection could be made", True),
        ("dial tcp 127.0.0.1:1234: target machine actively refused it", True),
        ("Connection refused", True),
        ("Connect call failed ('127.0.0.1', 1234)", True),
        ("League client not running", True),
        ("failed to connect", True),
        ("failed to connect: 404 not found", False),
        ("lcu api error: 500 Internal Server Error", False),
    ],
)
def test_is_connection_refused_error(message: str, refused: bool) -> None:
    assert is_connection_refused_error(RuntimeError(message)) is refused


# ---- client ----


class NoClient:
    async def get(self):
        return None

    def clear_cache(self) -> None:
        pass


@pytest.mark.asyncio
async def test_get_status_reports_not_running_without_raising(events) -> None:
    calls = collect(events, API_CALL_EVENT)
    pushed = collect(events, STATUS_CHANGED_EVENT)
    client = LcuClient(NoClient(), ConnectionStatusMonitor(events), events)

    status = await client.get_status()

    assert status.connected is False
    assert status.error == "League client not running"
    assert pushed == [{"connected": False}]
    assert len(calls) == 1
    assert calls[0].endpoint == STATUS_ENDPOINT
    assert calls[0].status_code == 500
    await client.close()


@pytest.mark.asyncio
async def test_summoner_is_fetched_with_basic_auth(tmp_path, events) -> None:
    seen_auth: list[str | None] = []

    async def current_summoner(request: web.Request) -> web.Response:
        seen_auth.append(request.headers.get("Authorization"))
        return web.json_response(SUMMONER_PAYLOAD)

    app = web.Application()
    app.router.add_get(CURRENT_SUMMONER_ENDPOINT, current_summoner)
    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    port = server.port

    calls = collect(events, API_CALL_EVENT)
    client = LcuClient(write_lockfile(tmp_path, port), ConnectionStatusMonitor(events), events)
    try:
        status = await client.get_status()
        summoner = await client.get_current_summoner()
    finally:
        await client.close()
        await server.close()

    assert status.connected is True
    assert status.port == str(port)
    assert summoner.riot_id == "Faker#KR1"
    assert summoner.summoner_level == 512
    assert summoner.reroll_points.current_points == 100

    assert seen_auth == [basic_auth_header(TOKEN)]
    assert [c.endpoint for c in calls] == [STATUS_ENDPOINT, CURRENT_SUMMONER_ENDPOINT]
    assert isinstance(calls[-1], ApiCallLog) and calls[-1].ok


@pytest.mark.asyncio
async def test_non_200_raises_api_error(tmp_path, events) -> None:
    async def missing(request: web.Request) -> web.Response:
        return web.json_response({"message": "not found"}, status=404)

    app = web.Application()
    app.router.add_get(CURRENT_SUMMONER_ENDPOINT, missing)
    server = TestServer(app, host="127.0.0.1")
    await server.start_server()

    calls = collect(events, API_CALL_EVENT)
    monitor = ConnectionStatusMonitor(events)
    client = LcuClient(write_lockfile(tmp_path, server.port), monitor, events)
    try:
        with pytest.raises(LcuApiError) as excinfo:
            await client.get_current_summoner()
    finally:
        await client.close()
        await server.close()

    assert excinfo.value.status_code == 404
    assert calls[-1].status_code == 404
    assert not calls[-1].ok
    # the server answered, so the connection is not considered lost
    assert monitor.state == ConnectionState.UNKNOWN


@pytest.mark.asyncio
async def test_refused_connection_marks_client_disconnected(tmp_path, events) -> None:
    pushed = collect(events, STATUS_CHANGED_EVENT)
    monitor = ConnectionStatusMonitor(events)
    client = LcuClient(write_lockfile(tmp_path, free_port()), monitor, events, timeout_seconds=2)
    try:
        with pytest.raises(LcuError):
            await client.get_current_summoner()
    finally:
        await client.close()

    assert monitor.state == ConnectionState.DISCONNECTED
    assert pushed == [{"connected": False}]


def test_basic_auth_header_uses_the_riot_user() -> None:
    header = basic_auth_header("s3cret")

    assert header.startswith("Basic ")
    assert base64.b64decode(header[len("Basic ") :]).decode() == "riot:s3cret"


@pytest.mark.asyncio
async def test_matchmaking_calls(tmp_path, events) -> None:
    accepted: list[str] = []
    ready_checks = [{"state": "InProgress", "playerResponse": "None", "timer": 4.5}, "None"]

    async def gameflow_phase(request: web.Request) -> web.Response:
        return web.json_response("ReadyCheck")

    async def ready_check(request: web.Request) -> web.Response:
        return web.json_response(ready_checks.pop(0))

    async def accept(request: web.Request) -> web.Response:
        accepted.append(request.method)
        return web.Response(status=204)

    app = web.Application()
    app.router.add_get(GAMEFLOW_PHASE_ENDPOINT, gameflow_phase)
    app.router.add_get(READY_CHECK_ENDPOINT, ready_check)
    app.router.add_post(ACCEPT_MATCH_ENDPOINT, accept)
    server = TestServer(app, host="127.0.0.1")
    await server.start_server()
    port = server.port

    client = LcuClient(write_lockfile(tmp_path, port), ConnectionStatusMonitor(events), events)
    try:
        phase = await client.get_gameflow_phase()
        first = await client.get_ready_check()
        await client.accept_match()
        with pytest.raises(LcuApiError) as excinfo:
            await client.get_ready_check()
    finally:
        await client.close()
        await server.close()

    assert phase == "ReadyCheck"
    assert first.acceptable
    assert first.timer == 4.5
    assert accepted == ["POST"]
    # "None" means no ready check exists
    assert excinfo.value.status_code == 404
