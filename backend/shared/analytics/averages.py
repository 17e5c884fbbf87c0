"""Overall averages across lobbies, sessions, playtime and players."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime

from shared.models import LobbyAnalytics, PlayerStatistics, SessionRecord, Snapshot
from shared.models.stats import (
    AverageStatistics,
    LobbyAverages,
    PlayerAverages,
    PlaytimeAverages,
    SessionAverages,
)

from .common import DAY, argmax, resolve_now


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def collection_days(snapshots: Sequence[Snapshot], now: datetime | None = None) -> int:
    """Whole days since the oldest snapshot, at least 1."""
    if not snapshots:
        return 1
    return max(1, (resolve_now(now) - snapshots[0].timestamp) // DAY)


def average_statistics(
    lobbies: Mapping[str, LobbyAnalytics],
    player_stats: Mapping[str, PlayerStatistics],
    snapshots: Sequence[Snapshot],
    sessions: Sequence[SessionRecord],
    now: datetime | None = None,
) -> AverageStatistics:
    lobby_values = list(lobbies.values())
    players = list(player_stats.values())

    average_size = _mean([l.average_players for l in lobby_values])
    average_duration = _mean([l.average_duration for l in lobby_values])

    hour_totals: dict[int, int] = {}
    day_totals: dict[int, int] = {}
    for snapshot in snapshots:
        hour = snapshot.timestamp.hour
        weekday = snapshot.timestamp.weekday()
        hour_totals[hour] = hour_totals.get(hour, 0) + snapshot.total_players
        day_totals[weekday] = day_totals.get(weekday, 0) + snapshot.total_players
    popular_hour = argmax(hour_totals)
    popular_day = argmax(day_totals)

    sessions_per_player = _mean([p.total_sessions for p in players])
    total_playtime = sum(p.total_minutes for p in players)
    daily_playtime = total_playtime / collection_days(snapshots, now)

    return AverageStatistics(
        lobbies=LobbyAverages(
            average_size=average_size,
            average_duration=average_duration,
            most_popular_hour=popular_hour,
            most_popular_day=popular_day,
        ),
        sessions=SessionAverages(
            average_length=_mean([s.duration_minutes for s in sessions]),
            # Mean lobby size
            average_players_per_session=average_size,
            average_sessions_per_player=sessions_per_player,
        ),
        playtime=PlaytimeAverages(
            average_daily_playtime=daily_playtime,
            average_weekly_playtime=daily_playtime * 7,
            most_active_hour=popular_hour,
            most_active_day=popular_day,
        ),
        players=PlayerAverages(
            average_sessions_per_player=sessions_per_player,
            average_playtime_per_player=total_playtime / len(players) if players else 0.0,
            average_games_per_player=_mean([p.games_played for p in players]),
        ),
    )
