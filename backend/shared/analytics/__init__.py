"""Read-only statistics over the persisted history.

Every query is a pure function of the collections it is given and returns
an explicit empty result (zeros, empty list, or None) when there is not
enough history.
"""

from .averages import average_statistics, collection_days
from .growth import (
    classify_growth,
    daily_activity,
    daily_unique_players,
    growth_trends,
    monthly_active_players,
    week_over_week,
)
from .leaderboards import (
    cross_game_players,
    longest_streak_leaderboard,
    most_active_leaderboard,
    most_diverse_leaderboard,
    most_social_leaderboard,
    top_players,
)
from .lobbies import lobby_duration_stats, lobby_host, lobby_summary, popular_lobbies, top_game_modes
from .retention import retention_metrics
from .sessions import longest_active_streak, player_session_stats, session_summary, streaks
from .timing import activity_heatmap, peak_times, predict_peak_time, recent_snapshots, weekday_patterns

__all__ = [
    "activity_heatmap",
    "average_statistics",
    "classify_growth",
    "collection_days",
    "cross_game_players",
    "daily_activity",
    "daily_unique_players",
    "growth_trends",
    "lobby_duration_stats",
    "lobby_host",
    "lobby_summary",
    "longest_active_streak",
    "longest_streak_leaderboard",
    "monthly_active_players",
    "most_active_leaderboard",
    "most_diverse_leaderboard",
    "most_social_leaderboard",
    "peak_times",
    "player_session_stats",
    "popular_lobbies",
    "predict_peak_time",
    "recent_snapshots",
    "retention_metrics",
    "session_summary",
    "streaks",
    "top_game_modes",
    "top_players",
    "week_over_week",
]
