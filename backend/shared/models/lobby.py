"""Data models for lobby analytics, notification state and lobby events."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from .base import format_timestamp, parse_timestamp, str_counts
from .snapshot import Lobby, LobbyConfig

LobbyEventKind = Literal["new", "reopened"]


def lobby_key(game: str, lobby_name: str) -> str:
    return f"{game}:{lobby_name}"


@dataclass
class LobbyAnalytics:
    """Running averages for one named lobby of one game."""

    game: str
    lobby_name: str
    first_seen: datetime
    last_seen: datetime
    appearances: int = 1
    average_duration: float = 0.0
    average_players: float = 0.0

    @property
    def key(self) -> str:
        return lobby_key(self.game, self.lobby_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "game": self.game,
            "lobby_name": self.lobby_name,
            "first_seen": format_timestamp(self.first_seen),
            "last_seen": format_timestamp(self.last_seen),
            "appearances": self.appearances,
            "average_duration": self.average_duration,
            "average_players": self.average_players,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LobbyAnalytics:
        return cls(
            game=str(data["game"]),
            lobby_name=str(data["lobby_name"]),
            first_seen=parse_timestamp(data["first_seen"]),
            last_seen=parse_timestamp(data["last_seen"]),
            appearances=int(data.get("appearances", 1)),
            average_duration=float(data.get("average_duration", 0.0)),
            average_players=float(data.get("average_players", 0.0)),
        )


@dataclass
class NotificationState:
    """Last-known occupancy of a lobby as seen by the notification detector."""

    players: list[str]
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"players": list(self.players), "timestamp": format_timestamp(self.timestamp)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NotificationState:
        players = data.get("players") or []
        return cls(
            players=[str(p) for p in players],
            timestamp=parse_timestamp(data["timestamp"]),
        )


@dataclass(frozen=True)
class LobbyEvent:
    """A "new" or "reopened" lobby alert, handed to the presentation layer."""

    kind: LobbyEventKind
    game: str
    lobby_name: str
    players: tuple[str, ...]
    player_count: int
    max_players: int
    config: LobbyConfig | None = None

    @classmethod
    def from_lobby(cls, kind: LobbyEventKind, game: str, lobby: Lobby) -> LobbyEvent:
        return cls(
            kind=kind,
            game=game,
            lobby_name=lobby.name,
            players=lobby.players,
            player_count=lobby.player_count,
            max_players=lobby.max_players,
            config=lobby.config,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "game": self.game,
            "lobby_name": self.lobby_name,
            "players": list(self.players),
            "player_count": self.player_count,
            "max_players": self.max_players,
            "config": self.config.to_dict() if self.config else None,
        }


@dataclass
class GameModeStats:
    """How often a game mode is opened, and with which tracks/laps/direction."""

    game: str
    mode: str
    count: int = 0
    tracks: dict[str, int] = field(default_factory=dict)
    average_laps: float = 0.0
    lap_samples: int = 0
    directions: dict[str, int] = field(default_factory=lambda: {"forward": 0, "reverse": 0})

    @property
    def key(self) -> str:
        return f"{self.game}:{self.mode}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "game": self.game,
            "mode": self.mode,
            "count": self.count,
            "tracks": dict(self.tracks),
            "average_laps": self.average_laps,
            "lap_samples": self.lap_samples,
            "directions": dict(self.directions),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameModeStats:
        directions = {"forward": 0, "reverse": 0}
        directions.update(str_counts(data.get("directions")))
        return cls(
            game=str(data["game"]),
            mode=str(data["mode"]),
            count=int(data.get("count", 0)),
            tracks=str_counts(data.get("tracks")),
            average_laps=float(data.get("average_laps", 0.0)),
            lap_samples=int(data.get("lap_samples", 0)),
            directions=directions,
        )
