"""Data models for per-player presence, sessions and activity records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import format_timestamp, int_keys, parse_timestamp, str_counts


@dataclass
class PlayerStatistics:
    """Running statistics for one player, created on first sighting.

    ``games`` counts cycles the player was listed in each game;
    ``playtime_by_game`` only grows when a session is committed.
    """

    first_seen: datetime
    last_seen: datetime
    total_sessions: int = 0
    total_minutes: int = 0
    games: dict[str, int] = field(default_factory=dict)
    peak_hours: dict[int, int] = field(default_factory=dict)
    peak_days: dict[int, int] = field(default_factory=dict)
    playtime_by_game: dict[str, int] = field(default_factory=dict)
    average_session_length: float = 0.0
    longest_session: int = 0

    @property
    def total_appearances(self) -> int:
        return sum(self.games.values())

    @property
    def games_played(self) -> int:
        return sum(1 for count in self.games.values() if count > 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_seen": format_timestamp(self.first_seen),
            "last_seen": format_timestamp(self.last_seen),
            "total_sessions": self.total_sessions,
            "total_minutes": self.total_minutes,
            "games": dict(self.games),
            "peak_hours": {str(k): v for k, v in self.peak_hours.items()},
            "peak_days": {str(k): v for k, v in self.peak_days.items()},
            "playtime_by_game": dict(self.playtime_by_game),
            "average_session_length": self.average_session_length,
            "longest_session": self.longest_session,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlayerStatistics:
        return cls(
            first_seen=parse_timestamp(data["first_seen"]),
            last_seen=parse_timestamp(data["last_seen"]),
            total_sessions=int(data.get("total_sessions", 0)),
            total_minutes=int(data.get("total_minutes", 0)),
            games=str_counts(data.get("games")),
            peak_hours=int_keys(data.get("peak_hours")),
            peak_days=int_keys(data.get("peak_days")),
            playtime_by_game=str_counts(data.get("playtime_by_game")),
            average_session_length=float(data.get("average_session_length", 0.0)),
            longest_session=int(data.get("longest_session", 0)),
        )


@dataclass(frozen=True)
class SessionRecord:
    """A committed, contiguous presence interval of at least the noise floor."""

    player: str
    game: str
    start: datetime
    end: datetime
    duration_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "game": self.game,
            "start": format_timestamp(self.start),
            "end": format_timestamp(self.end),
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionRecord:
        return cls(
            player=str(data["player"]),
            game=str(data["game"]),
            start=parse_timestamp(data["start"]),
            end=parse_timestamp(data["end"]),
            duration_minutes=int(data["duration_minutes"]),
        )


@dataclass(frozen=True)
class ActivityRecord:
    """One player observed in one game during one cycle."""

    player: str
    game: str
    lobby_name: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "game": self.game,
            "lobby_name": self.lobby_name,
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ActivityRecord:
        return cls(
            player=str(data["player"]),
            game=str(data["game"]),
            lobby_name=str(data.get("lobby_name") or ""),
            timestamp=parse_timestamp(data["timestamp"]),
        )
