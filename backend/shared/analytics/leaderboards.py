"""Leaderboards over player statistics, sessions and the social graph."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from shared.models import PlayerStatistics, SessionRecord, SocialStats
from shared.models.stats import LeaderboardEntry

from .common import ranked
from .sessions import sessions_by_player, streaks


def _ranked_entries(entries: Iterable[LeaderboardEntry], limit: int) -> list[LeaderboardEntry]:
    return ranked(entries, lambda e: e.value, lambda e: e.name, limit)


def top_players(player_stats: Mapping[str, PlayerStatistics], limit: int = 10) -> list[LeaderboardEntry]:
    """Players by total appearances across every game."""
    return _ranked_entries(
        (
            LeaderboardEntry(name=name, value=stats.total_appearances, playtime_minutes=stats.total_minutes)
            for name, stats in player_stats.items()
        ),
        limit,
    )


def most_active_leaderboard(
    player_stats: Mapping[str, PlayerStatistics], limit: int = 10
) -> list[LeaderboardEntry]:
    # Same ranking as top_players; the entry carries playtime for display.
    return top_players(player_stats, limit)


def longest_streak_leaderboard(sessions: Iterable[SessionRecord], limit: int = 10) -> list[LeaderboardEntry]:
    return _ranked_entries(
        (
            LeaderboardEntry(name=player, value=streaks(records)[1])
            for player, records in sessions_by_player(sessions).items()
        ),
        limit,
    )


def most_diverse_leaderboard(
    player_stats: Mapping[str, PlayerStatistics], limit: int = 10
) -> list[LeaderboardEntry]:
    return _ranked_entries(
        (LeaderboardEntry(name=name, value=stats.games_played) for name, stats in player_stats.items()),
        limit,
    )


def most_social_leaderboard(social: Mapping[str, SocialStats], limit: int = 10) -> list[LeaderboardEntry]:
    return _ranked_entries(
        (LeaderboardEntry(name=name, value=stats.unique_partners) for name, stats in social.items()),
        limit,
    )


def cross_game_players(player_stats: Mapping[str, PlayerStatistics], min_games: int = 4) -> list[str]:
    return sorted(name for name, stats in player_stats.items() if stats.games_played >= min_games)
