"""Snapshot model and the normalization boundary for upstream game readings.

Upstream adapters hand over one loosely-shaped ``{players, lobbies}`` payload
per game.  Everything is coerced here into fully populated ``GameReading``
objects so that the trackers never have to deal with missing fields.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .base import format_timestamp, parse_timestamp

DEFAULT_GAMES: tuple[str, ...] = ("ae", "apoc", "pr", "mv")
DEFAULT_LOBBY_NAME = "Unnamed Lobby"
MAIN_MENU = "Main Menu"

TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


@dataclass(frozen=True)
class LobbyConfig:
    """Optional race settings advertised by a lobby."""

    game_mode: str | None = None
    track: str | None = None
    lap_count: str | None = None
    direction: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "game_mode": self.game_mode,
            "track": self.track,
            "lap_count": self.lap_count,
            "direction": self.direction,
        }


@dataclass(frozen=True)
class Lobby:
    """A named room inside a game server."""

    name: str
    player_count: int = 0
    max_players: int = 0
    players: tuple[str, ...] = ()
    is_active: bool = False
    config: LobbyConfig | None = None

    @property
    def has_players(self) -> bool:
        """Active and occupied; the only lobbies the trackers look at."""
        return self.is_active and self.player_count > 0


@dataclass(frozen=True)
class GameReading:
    """Normalized result of polling one game for one cycle."""

    game: str
    players: tuple[str, ...] = ()
    lobbies: tuple[Lobby, ...] = ()


@dataclass(frozen=True)
class GameSnapshot:
    players: tuple[str, ...] = ()
    lobby_count: int = 0


@dataclass(frozen=True)
class Snapshot:
    """Canonical per-cycle record of who was online in which game.

    ``games`` preserves the configured game priority order.
    """

    timestamp: datetime
    games: dict[str, GameSnapshot] = field(default_factory=dict)
    total_players: int = 0

    @classmethod
    def from_readings(cls, readings: Mapping[str, GameReading], timestamp: datetime) -> Snapshot:
        games = {
            game: GameSnapshot(players=reading.players, lobby_count=len(reading.lobbies))
            for game, reading in readings.items()
        }
        unique: set[str] = set()
        for game_snapshot in games.values():
            unique.update(game_snapshot.players)
        return cls(timestamp=timestamp, games=games, total_players=len(unique))

    def players_by_game(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        for game, game_snapshot in self.games.items():
            yield game, game_snapshot.players

    def all_players(self) -> set[str]:
        unique: set[str] = set()
        for _, players in self.players_by_game():
            unique.update(players)
        return unique

    def first_game_for(self, player: str) -> str | None:
        """First game, in priority order, whose player list contains ``player``."""
        for game, players in self.players_by_game():
            if player in players:
                return game
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": format_timestamp(self.timestamp),
            "games": {
                game: {"players": list(gs.players), "lobbies": gs.lobby_count}
                for game, gs in self.games.items()
            },
            "total_players": self.total_players,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Snapshot:
        games = {
            str(game): GameSnapshot(
                players=_coerce_names((raw or {}).get("players")),
                lobby_count=_coerce_count((raw or {}).get("lobbies")),
            )
            for game, raw in (data.get("games") or {}).items()
        }
        total = data.get("total_players")
        if total is None:
            total = len({p for gs in games.values() for p in gs.players})
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            games=games,
            total_players=int(total),
        )


# ==================== Normalization ====================


def _coerce_count(raw: Any) -> int:
    if isinstance(raw, bool):
        return int(raw)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


def _coerce_text(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _coerce_flag(raw: Any, default: bool) -> bool:
    """Booleans, numbers and "true"/"false"-style strings; anything else is ``default``."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    return default


def _coerce_names(raw: Any) -> tuple[str, ...]:
    """Keep non-empty string names, first occurrence wins."""
    if not isinstance(raw, (list, tuple)):
        return ()
    names: dict[str, None] = {}
    for item in raw:
        if isinstance(item, str) and item.strip():
            names.setdefault(item.strip(), None)
    return tuple(names)


def normalize_config(raw: Any) -> LobbyConfig | None:
    if not isinstance(raw, Mapping):
        return None
    config = LobbyConfig(
        game_mode=_coerce_text(raw.get("game_mode", raw.get("gameMode"))),
        track=_coerce_text(raw.get("track")),
        lap_count=_coerce_text(raw.get("lap_count", raw.get("lapCount"))),
        direction=_coerce_text(raw.get("direction")),
    )
    if config == LobbyConfig():
        return None
    return config


def normalize_lobby(raw: Any) -> Lobby | None:
    if not isinstance(raw, Mapping):
        return None

    players = _coerce_names(raw.get("players"))
    if "player_count" in raw:
        player_count = _coerce_count(raw.get("player_count"))
    else:
        player_count = len(players)

    is_active = _coerce_flag(raw.get("is_active"), default=player_count > 0)

    return Lobby(
        name=_coerce_text(raw.get("name")) or DEFAULT_LOBBY_NAME,
        player_count=player_count,
        max_players=_coerce_count(raw.get("max_players")),
        players=players,
        is_active=is_active,
        config=normalize_config(raw.get("config")),
    )


def normalize_reading(game: str, raw: Any) -> GameReading:
    """Coerce one upstream payload into a ``GameReading`` (never raises)."""
    if not isinstance(raw, Mapping):
        return GameReading(game=game)

    raw_lobbies = raw.get("lobbies")
    lobbies: list[Lobby] = []
    if isinstance(raw_lobbies, (list, tuple)):
        for item in raw_lobbies:
            lobby = normalize_lobby(item)
            if lobby is not None:
                lobbies.append(lobby)

    return GameReading(game=game, players=_coerce_names(raw.get("players")), lobbies=tuple(lobbies))


def normalize_readings(
    raw_by_game: Mapping[str, Any] | None, games: Sequence[str] = DEFAULT_GAMES
) -> dict[str, GameReading]:
    """Normalize every game's payload, ordered by game priority.

    Configured games missing from ``raw_by_game`` become empty readings;
    unconfigured games are appended after the configured ones.
    """
    raw_by_game = raw_by_game if isinstance(raw_by_game, Mapping) else {}
    ordered = list(games) + [str(g) for g in raw_by_game if g not in games]
    return {game: normalize_reading(game, raw_by_game.get(game)) for game in ordered}
