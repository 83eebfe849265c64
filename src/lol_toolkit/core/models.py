# src/lol_toolkit/core/models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ConnectionState(StrEnum):
    """Semantic connection state of the local League client API."""

    UNKNOWN = "unknown"
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(slots=True, frozen=True)
class LcuStatus:
    """
    Result of a status check (or a status synthesized from a push event).

    Port and token are only known when the status came from a real check.
    """

    connected: bool
    port: str | None = None
    auth_token: str | None = None
    error: str | None = None

    @classmethod
    def disconnected(cls, error: str | None = None) -> LcuStatus:
        return cls(connected=False, error=error)


def connection_state(status: LcuStatus | None) -> ConnectionState:
    if status is None:
        return ConnectionState.UNKNOWN
    return ConnectionState.CONNECTED if status.connected is True else ConnectionState.DISCONNECTED


def _int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(slots=True, frozen=True)
class RerollPoints:
    current_points: int = 0
    max_rolls: int = 0
    number_of_rolls: int = 0
    points_cost_to_roll: int = 0
    points_to_reroll: int = 0

    @classmethod
    def from_payload(cls, data: Mapping[str, Any] | None) -> RerollPoints:
        data = data or {}
        return cls(
            current_points=_int(data.get("currentPoints")),
            max_rolls=_int(data.get("maxRolls")),
            number_of_rolls=_int(data.get("numberOfRolls")),
            points_cost_to_roll=_int(data.get("pointsCostToRoll")),
            points_to_reroll=_int(data.get("pointsToReroll")),
        )


@dataclass(slots=True, frozen=True)
class CurrentSummoner:
    """The summoner currently logged into the League client."""

    puuid: str
    summoner_id: int
    account_id: int
    game_name: str
    tag_line: str
    display_name: str = ""
    internal_name: str = ""
    summoner_level: int = 0
    profile_icon_id: int = 0
    percent_complete_for_next_level: int = 0
    xp_since_last_level: int = 0
    xp_until_next_level: int = 0
    name_change_flag: bool = False
    reroll_points: RerollPoints = field(default_factory=RerollPoints)

    @property
    def riot_id(self) -> str:
        if self.game_name and self.tag_line:
            return f"{self.game_name}#{self.tag_line}"
        return self.game_name or self.display_name

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> CurrentSummoner:
        """Build from the LCU JSON object (camelCase keys, unknown keys ignored)."""
        if not isinstance(data, Mapping):
            raise ValueError("Expected JSON object for current summoner")

        reroll = data.get("rerollPoints")
        return cls(
            puuid=str(data.get("puuid") or ""),
            summoner_id=_int(data.get("summonerId")),
            account_id=_int(data.get("accountId")),
            game_name=str(data.get("gameName") or ""),
            tag_line=str(data.get("tagLine") or ""),
            display_name=str(data.get("displayName") or ""),
            internal_name=str(data.get("internalName") or ""),
            summoner_level=_int(data.get("summonerLevel")),
            profile_icon_id=_int(data.get("profileIconId")),
            percent_complete_for_next_level=_int(data.get("percentCompleteForNextLevel")),
            xp_since_last_level=_int(data.get("xpSinceLastLevel")),
            xp_until_next_level=_int(data.get("xpUntilNextLevel")),
            name_change_flag=bool(data.get("nameChangeFlag", False)),
            reroll_points=RerollPoints.from_payload(reroll if isinstance(reroll, Mapping) else None),
        )


class GameflowPhase(StrEnum):
    NONE = "None"
    LOBBY = "Lobby"
    MATCHMAKING = "Matchmaking"
    READY_CHECK = "ReadyCheck"
    CHAMP_SELECT = "ChampSelect"
    IN_PROGRESS = "InProgress"
    RECONNECT = "Reconnect"
    WAITING_FOR_STATS = "WaitingForStats"
    PRE_END_OF_GAME = "PreEndOfGame"


class ClientState(StrEnum):
    """Coarse client state, as far as auto-accept cares."""

    NOT_IN_QUEUE = "not_in_queue"
    IN_QUEUE = "in_queue"
    MATCH_FOUND = "match_found"
    CHAMP_SELECT = "champ_select"
    IN_GAME = "in_game"
    UNKNOWN = "unknown"


_PHASE_TO_CLIENT_STATE: dict[str, ClientState] = {
    GameflowPhase.NONE: ClientState.NOT_IN_QUEUE,
    GameflowPhase.LOBBY: ClientState.NOT_IN_QUEUE,
    GameflowPhase.MATCHMAKING: ClientState.IN_QUEUE,
    GameflowPhase.READY_CHECK: ClientState.MATCH_FOUND,
    GameflowPhase.CHAMP_SELECT: ClientState.CHAMP_SELECT,
    GameflowPhase.IN_PROGRESS: ClientState.IN_GAME,
    GameflowPhase.RECONNECT: ClientState.IN_GAME,
    # post-game screens
    GameflowPhase.WAITING_FOR_STATS: ClientState.NOT_IN_QUEUE,
    GameflowPhase.PRE_END_OF_GAME: ClientState.NOT_IN_QUEUE,
}


def client_state_for_phase(phase: str) -> ClientState:
    return _PHASE_TO_CLIENT_STATE.get(str(phase), ClientState.UNKNOWN)


class ReadyCheckState(StrEnum):
    IN_PROGRESS = "InProgress"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"


@dataclass(slots=True, frozen=True)
class ReadyCheck:
    """Matchmaking ready check (`/lol-matchmaking/v1/ready-check`)."""

    state: str
    player_response: str = ""
    timer: float = 0.0

    @property
    def awaiting_response(self) -> bool:
        return self.player_response in ("", "None")

    @property
    def acceptable(self) -> bool:
        return self.state == ReadyCheckState.IN_PROGRESS and self.awaiting_response

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> ReadyCheck:
        if not isinstance(data, Mapping):
            raise ValueError("Expected JSON object for ready check")
        try:
            timer = float(data.get("timer") or 0.0)
        except (TypeError, ValueError):
            timer = 0.0
        return cls(
            state=str(data.get("state") or ""),
            player_response=str(data.get("playerResponse") or ""),
            timer=timer,
        )


@dataclass(slots=True, frozen=True)
class SyncSnapshot:
    """Read-only view of the synchronized store, handed to presentation code."""

    status: LcuStatus | None
    summoner: CurrentSummoner | None
    loading: bool
    error: str | None
    is_polling: bool
    auto_accept: bool = False
    client_state: ClientState | None = None

    @property
    def state(self) -> ConnectionState:
        return connection_state(self.status)
