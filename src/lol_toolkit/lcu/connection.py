# src/lol_toolkit/lcu/connection.py

"""
Discovery of the local client's port and auth token.

Two sources, in order:
- the lockfile written by the client (`name:pid:port:password:protocol`),
- the command line of the running LeagueClientUx process.

Results are cached for a short time; any failure clears the cache.
"""

from __future__ import annotations

import asyncio
import logging
import re
import sys
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import ClientNotRunningError

logger = logging.getLogger(__name__)

PORT_RE = re.compile(r"--app-port=(\d+)")
TOKEN_RE = re.compile(r"--remoting-auth-token=([\w-]+)")

CLIENT_PROCESS_NAME = "LeagueClientUx.exe"
CREATE_NO_WINDOW = 0x08000000
DEFAULT_CACHE_TTL = 30.0


@dataclass(slots=True, frozen=True)
class ConnectionInfo:
    port: str
    auth_token: str
    protocol: str = "https"

    def base_url(self, host: str = "127.0.0.1") -> str:
        return f"{self.protocol}://{host}:{self.port}"


def parse_process_args(output: str) -> ConnectionInfo:
    port_match = PORT_RE.search(output or "")
    if port_match is None:
        raise ClientNotRunningError("league client not found")

    token_match = TOKEN_RE.search(output or "")
    if token_match is None:
        raise ClientNotRunningError("auth token not found")

    return ConnectionInfo(port=port_match.group(1), auth_token=token_match.group(1))


def parse_lockfile(text: str) -> ConnectionInfo:
    parts = (text or "").strip().split(":")
    if len(parts) != 5:
        raise ClientNotRunningError("malformed lockfile")

    _name, _pid, port, password, protocol = parts
    if not port.isdigit() or not password:
        raise ClientNotRunningError("malformed lockfile")
    return ConnectionInfo(port=port, auth_token=password, protocol=protocol or "https")


async def read_process_commandline() -> str:
    """Return the command line(s) of running client processes (may be empty)."""
    if sys.platform == "win32":
        argv = ["wmic", "process", "where", f"name='{CLIENT_PROCESS_NAME}'", "get", "commandline"]
        kwargs = {"creationflags": CREATE_NO_WINDOW}
    else:
        argv = ["ps", "-A", "-o", "args"]
        kwargs = {}

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            **kwargs,
        )
    except OSError as exc:
        raise ClientNotRunningError(f"{CLIENT_PROCESS_NAME} not running") from exc

    stdout, _ = await proc.communicate()
    if proc.returncode != 0:
        raise ClientNotRunningError(f"{CLIENT_PROCESS_NAME} not running")
    return stdout.decode("utf-8", errors="replace")


class ConnectionLocator:
    def __init__(
        self,
        *,
        lockfile_path: str | Path | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        read_commandline: Callable[[], Awaitable[str]] = read_process_commandline,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lockfile_path = Path(lockfile_path).expanduser() if lockfile_path else None
        self._cache_ttl = max(0.0, float(cache_ttl))
        self._read_commandline = read_commandline
        self._clock = clock
        self._cached: ConnectionInfo | None = None
        self._cached_at = 0.0

    def clear_cache(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    async def get(self) -> ConnectionInfo | None:
        """Connection info, or None if the client is not running."""
        try:
            return await self.find()
        except ClientNotRunningError as exc:
            logger.debug("Client connection info unavailable: %s", exc)
            return None

    async def find(self) -> ConnectionInfo:
        if self._cached is not None and self._clock() - self._cached_at < self._cache_ttl:
            return self._cached

        try:
            info = await self._discover()
        except ClientNotRunningError:
            self.clear_cache()
            raise

        self._cached = info
        self._cached_at = self._clock()
        return info

    async def _discover(self) -> ConnectionInfo:
        if self._lockfile_path is not None and self._lockfile_path.is_file():
            try:
                return parse_lockfile(self._lockfile_path.read_text("utf-8"))
            except (OSError, ClientNotRunningError) as exc:
                logger.debug("Lockfile %s unusable: %s", self._lockfile_path, exc)

        output = await self._read_commandline()
        return parse_process_args(output)
