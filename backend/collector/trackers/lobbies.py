"""Running lobby averages and game-mode opening counts."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from shared.models import GameModeStats, GameReading, Lobby, LobbyAnalytics, lobby_key

from .sessions import elapsed_minutes

logger = logging.getLogger(__name__)

# Gaps of this many minutes or more mean the named lobby was reopened
RESTART_GAP_MINUTES = 60


def parse_laps(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class LobbyTracker:
    def __init__(
        self,
        lobbies: dict[str, LobbyAnalytics] | None = None,
        game_modes: dict[str, GameModeStats] | None = None,
    ) -> None:
        self.lobbies: dict[str, LobbyAnalytics] = lobbies if lobbies is not None else {}
        self.game_modes: dict[str, GameModeStats] = game_modes if game_modes is not None else {}

    def update(self, readings: Mapping[str, GameReading], now: datetime) -> None:
        for game, reading in readings.items():
            for lobby in reading.lobbies:
                if lobby.has_players:
                    self._observe(game, lobby, now)

    def _observe(self, game: str, lobby: Lobby, now: datetime) -> None:
        key = lobby_key(game, lobby.name)
        analytics = self.lobbies.get(key)
        if analytics is None:
            self.lobbies[key] = LobbyAnalytics(
                game=game,
                lobby_name=lobby.name,
                first_seen=now,
                last_seen=now,
                appearances=1,
                average_duration=0.0,
                average_players=float(lobby.player_count),
            )
            self._record_opening(game, lobby)
            return

        analytics.appearances += 1
        gap = elapsed_minutes(analytics.last_seen, now)
        if 0 < gap < RESTART_GAP_MINUTES:
            analytics.average_duration += (gap - analytics.average_duration) / analytics.appearances
        elif gap >= RESTART_GAP_MINUTES:
            self._record_opening(game, lobby)
        analytics.average_players += (lobby.player_count - analytics.average_players) / analytics.appearances
        analytics.last_seen = now

    def _record_opening(self, game: str, lobby: Lobby) -> None:
        config = lobby.config
        if config is None or config.game_mode is None:
            return

        key = f"{game}:{config.game_mode}"
        stats = self.game_modes.get(key)
        if stats is None:
            stats = GameModeStats(game=game, mode=config.game_mode)
            self.game_modes[key] = stats

        stats.count += 1
        if config.track:
            stats.tracks[config.track] = stats.tracks.get(config.track, 0) + 1
        laps = parse_laps(config.lap_count)
        if laps is not None:
            stats.lap_samples += 1
            stats.average_laps += (laps - stats.average_laps) / stats.lap_samples
        if config.direction:
            direction = "reverse" if "rev" in config.direction.lower() else "forward"
            stats.directions[direction] = stats.directions.get(direction, 0) + 1
        logger.debug(f"Game mode opening: {key} (count={stats.count})")
