"""Derived, non-persisted view objects returned by the analytics queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Trend = Literal["increasing", "decreasing", "stable"]


@dataclass
class LeaderboardEntry:
    name: str
    value: int
    playtime_minutes: int = 0


@dataclass
class StreakHolder:
    player: str
    days: int


@dataclass
class PlayerSessionStats:
    total_sessions: int
    average_session_length: float
    longest_session: int
    shortest_session: int
    streak_days: int
    last_session_end: datetime


@dataclass
class SessionSummary:
    total_sessions: int = 0
    average_length: float = 0.0
    longest_player: str | None = None
    longest_duration: int = 0


@dataclass
class RetentionMetrics:
    new_players: int = 0
    returning_players: int = 0
    retention_rate: float = 0.0
    churn_rate: float = 0.0


@dataclass
class WeekOverWeek:
    growth: int = 0
    percent_change: float = 0.0


@dataclass
class GrowthTrends:
    daily_players: dict[str, int] = field(default_factory=dict)
    week_over_week_growth: float = 0.0
    trend: Trend = "stable"


@dataclass
class PredictiveData:
    expected_peak_hour: int
    expected_player_count: int
    confidence: float
    trend: Trend


@dataclass
class HourCount:
    hour: int
    count: int


@dataclass
class WeekdayPattern:
    weekday: int
    day: str
    average_players: float


@dataclass
class LobbyDurationStats:
    average_duration: float = 0.0
    longest_game: str | None = None
    longest_lobby: str | None = None
    longest_duration: float = 0.0


@dataclass
class NameCount:
    name: str
    count: int


@dataclass
class LobbySummary:
    total_lobbies: int = 0
    average_duration: float = 0.0
    top_hosts: list[NameCount] = field(default_factory=list)
    popular_lobbies: list[NameCount] = field(default_factory=list)


@dataclass
class LobbyAverages:
    average_size: float = 0.0
    average_duration: float = 0.0
    most_popular_hour: int = 0
    most_popular_day: int = 0


@dataclass
class SessionAverages:
    average_length: float = 0.0
    average_players_per_session: float = 0.0
    average_sessions_per_player: float = 0.0


@dataclass
class PlaytimeAverages:
    average_daily_playtime: float = 0.0
    average_weekly_playtime: float = 0.0
    most_active_hour: int = 0
    most_active_day: int = 0


@dataclass
class PlayerAverages:
    average_sessions_per_player: float = 0.0
    average_playtime_per_player: float = 0.0
    average_games_per_player: float = 0.0


@dataclass
class AverageStatistics:
    lobbies: LobbyAverages = field(default_factory=LobbyAverages)
    sessions: SessionAverages = field(default_factory=SessionAverages)
    playtime: PlaytimeAverages = field(default_factory=PlaytimeAverages)
    players: PlayerAverages = field(default_factory=PlayerAverages)
