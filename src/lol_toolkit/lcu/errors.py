# src/lol_toolkit/lcu/errors.py

from __future__ import annotations


class LcuError(Exception):
    """Any failure talking to the local League client API."""


class ClientNotRunningError(LcuError):
    """The League client process (or its connection info) could not be found."""


class LcuApiError(LcuError):
    """The client answered with a non-200 status."""

    def __init__(self, status_code: int, body: str = "", *, reason: str = "") -> None:
        self.status_code = int(status_code)
        self.body = body
        self.reason = reason
        text = f"{self.status_code} {reason}".strip()
        super().__init__(f"lcu api error: {text} - {body[:200]}")
