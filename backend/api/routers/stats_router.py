"""Statistics API routes"""

import logging
from dataclasses import asdict
from datetime import datetime
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from shared import analytics
from shared.models import History
from shared.models.stats import LeaderboardEntry as LeaderboardRow

from ..core.dependencies import get_history

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


class LeaderboardKind(str, Enum):
    active = "active"
    streak = "streak"
    diverse = "diverse"
    social = "social"


# ============================================
# Response Models
# ============================================


class LeaderboardEntry(BaseModel):
    name: str
    value: int
    playtime_minutes: int = 0


class PlayerStatistics(BaseModel):
    first_seen: datetime
    last_seen: datetime
    total_sessions: int
    total_minutes: int
    games: dict[str, int]
    peak_hours: dict[int, int]
    peak_days: dict[int, int]
    playtime_by_game: dict[str, int]
    average_session_length: float
    longest_session: int


class PlayerSessionStats(BaseModel):
    total_sessions: int
    average_session_length: float
    longest_session: int
    shortest_session: int
    streak_days: int
    last_session_end: datetime


class SocialStats(BaseModel):
    co_players: dict[str, int]
    most_frequent_partner: str
    unique_partners: int


class PlayerProfile(BaseModel):
    name: str
    statistics: PlayerStatistics
    sessions: PlayerSessionStats | None
    social: SocialStats | None


class RetentionMetrics(BaseModel):
    new_players: int
    returning_players: int
    retention_rate: float
    churn_rate: float


class WeekOverWeek(BaseModel):
    growth: int
    percent_change: float


class GrowthTrends(BaseModel):
    daily_players: dict[str, int]
    week_over_week_growth: float
    trend: str


class PredictiveData(BaseModel):
    expected_peak_hour: int
    expected_player_count: int
    confidence: float
    trend: str


class LobbyAverages(BaseModel):
    average_size: float
    average_duration: float
    most_popular_hour: int
    most_popular_day: int


class SessionAverages(BaseModel):
    average_length: float
    average_players_per_session: float
    average_sessions_per_player: float


class PlaytimeAverages(BaseModel):
    average_daily_playtime: float
    average_weekly_playtime: float
    most_active_hour: int
    most_active_day: int


class PlayerAverages(BaseModel):
    average_sessions_per_player: float
    average_playtime_per_player: float
    average_games_per_player: float


class AverageStatistics(BaseModel):
    lobbies: LobbyAverages
    sessions: SessionAverages
    playtime: PlaytimeAverages
    players: PlayerAverages


class Lobby(BaseModel):
    game: str
    lobby_name: str
    first_seen: datetime
    last_seen: datetime
    appearances: int
    average_duration: float
    average_players: float


class LobbyDurationStats(BaseModel):
    average_duration: float
    longest_game: str | None
    longest_lobby: str | None
    longest_duration: float


class NameCount(BaseModel):
    name: str
    count: int


class LobbySummary(BaseModel):
    total_lobbies: int
    average_duration: float
    top_hosts: list[NameCount]
    popular_lobbies: list[NameCount]


class GameMode(BaseModel):
    game: str
    mode: str
    count: int
    tracks: dict[str, int]
    average_laps: float
    directions: dict[str, int]


class SessionSummary(BaseModel):
    total_sessions: int
    average_length: float
    longest_player: str | None
    longest_duration: int


class StreakHolder(BaseModel):
    player: str
    days: int


class HourCount(BaseModel):
    hour: int
    count: int


class WeekdayPattern(BaseModel):
    weekday: int
    day: str
    average_players: float


class GameSnapshot(BaseModel):
    players: list[str]
    lobbies: int


class Snapshot(BaseModel):
    timestamp: datetime
    games: dict[str, GameSnapshot]
    total_players: int


class MonthlyActive(BaseModel):
    players: int


# ============================================
# Players & Leaderboards
# ============================================


def _entries(entries: list[LeaderboardRow]) -> list[LeaderboardEntry]:
    return [LeaderboardEntry(**asdict(e)) for e in entries]


@router.get("/players/top", response_model=list[LeaderboardEntry])
async def get_top_players(
    limit: int = Query(10, ge=1, le=100),
    history: History = Depends(get_history),
) -> list[LeaderboardEntry]:
    """Players ranked by appearances across all games"""
    return _entries(analytics.top_players(history.player_stats, limit))


@router.get("/players/cross-game", response_model=list[str])
async def get_cross_game_players(
    min_games: int = Query(4, ge=1),
    history: History = Depends(get_history),
) -> list[str]:
    return analytics.cross_game_players(history.player_stats, min_games)


@router.get("/players/by-name/{name:path}", response_model=PlayerProfile)
async def get_player(name: str, history: History = Depends(get_history)) -> PlayerProfile:
    """Profile lookup lives under its own prefix so names like "top" stay reachable."""
    stats = history.player_stats.get(name)
    if stats is None:
        raise HTTPException(status_code=404, detail="Player not found")

    sessions = analytics.player_session_stats(history.sessions, name)
    social = history.social.get(name)
    return PlayerProfile(
        name=name,
        statistics=PlayerStatistics(**asdict(stats)),
        sessions=PlayerSessionStats(**asdict(sessions)) if sessions else None,
        social=SocialStats(**asdict(social), unique_partners=social.unique_partners) if social else None,
    )


@router.get("/leaderboards/{kind}", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    kind: LeaderboardKind,
    limit: int = Query(10, ge=1, le=100),
    history: History = Depends(get_history),
) -> list[LeaderboardEntry]:
    """
    Get a leaderboard

    Args:
        kind: active | streak | diverse | social
    """
    if kind is LeaderboardKind.active:
        entries = analytics.most_active_leaderboard(history.player_stats, limit)
    elif kind is LeaderboardKind.streak:
        entries = analytics.longest_streak_leaderboard(history.sessions, limit)
    elif kind is LeaderboardKind.diverse:
        entries = analytics.most_diverse_leaderboard(history.player_stats, limit)
    else:
        entries = analytics.most_social_leaderboard(history.social, limit)
    return _entries(entries)


# ============================================
# Retention, Growth & Prediction
# ============================================


@router.get("/retention", response_model=RetentionMetrics)
async def get_retention(
    days: int = Query(7, ge=1, le=365),
    history: History = Depends(get_history),
) -> RetentionMetrics:
    return RetentionMetrics(**asdict(analytics.retention_metrics(history.sessions, days)))


@router.get("/growth", response_model=GrowthTrends)
async def get_growth(
    days: int = Query(30, ge=1, le=365),
    history: History = Depends(get_history),
) -> GrowthTrends:
    return GrowthTrends(**asdict(analytics.growth_trends(history.snapshots, days)))


@router.get("/growth/week-over-week", response_model=WeekOverWeek)
async def get_week_over_week(history: History = Depends(get_history)) -> WeekOverWeek:
    return WeekOverWeek(**asdict(analytics.week_over_week(history.snapshots)))


@router.get("/prediction", response_model=PredictiveData | None)
async def get_prediction(history: History = Depends(get_history)) -> PredictiveData | None:
    """Predicted peak hour; null until at least 24 snapshots exist"""
    prediction = analytics.predict_peak_time(history.snapshots)
    return PredictiveData(**asdict(prediction)) if prediction else None


@router.get("/averages", response_model=AverageStatistics)
async def get_averages(history: History = Depends(get_history)) -> AverageStatistics:
    averages = analytics.average_statistics(
        history.lobbies, history.player_stats, history.snapshots, history.sessions
    )
    return AverageStatistics(**asdict(averages))


# ============================================
# Lobbies & Game Modes
# ============================================


@router.get("/lobbies/popular", response_model=list[Lobby])
async def get_popular_lobbies(
    limit: int = Query(10, ge=1, le=100),
    history: History = Depends(get_history),
) -> list[Lobby]:
    return [Lobby(**asdict(l)) for l in analytics.popular_lobbies(history.lobbies, limit)]


@router.get("/lobbies/durations", response_model=LobbyDurationStats)
async def get_lobby_durations(history: History = Depends(get_history)) -> LobbyDurationStats:
    return LobbyDurationStats(**asdict(analytics.lobby_duration_stats(history.lobbies)))


@router.get("/lobbies/summary", response_model=LobbySummary)
async def get_lobby_summary(history: History = Depends(get_history)) -> LobbySummary:
    return LobbySummary(**asdict(analytics.lobby_summary(history.lobbies)))


@router.get("/game-modes", response_model=list[GameMode])
async def get_game_modes(
    game: str | None = None,
    limit: int = Query(10, ge=1, le=100),
    history: History = Depends(get_history),
) -> list[GameMode]:
    return [GameMode(**asdict(m)) for m in analytics.top_game_modes(history.game_modes, game, limit)]


# ============================================
# Sessions
# ============================================


@router.get("/sessions/summary", response_model=SessionSummary)
async def get_session_summary(history: History = Depends(get_history)) -> SessionSummary:
    return SessionSummary(**asdict(analytics.session_summary(history.sessions)))


@router.get("/sessions/longest-streak", response_model=StreakHolder | None)
async def get_longest_streak(history: History = Depends(get_history)) -> StreakHolder | None:
    holder = analytics.longest_active_streak(history.sessions)
    return StreakHolder(**asdict(holder)) if holder else None


# ============================================
# Activity
# ============================================


@router.get("/activity/recent", response_model=list[Snapshot])
async def get_recent_snapshots(
    hours: int = Query(24, ge=1, le=24 * 60),
    history: History = Depends(get_history),
) -> list[Snapshot]:
    return [Snapshot(**s.to_dict()) for s in analytics.recent_snapshots(history.snapshots, hours)]


@router.get("/activity/peak-times", response_model=list[HourCount])
async def get_peak_times(history: History = Depends(get_history)) -> list[HourCount]:
    return [HourCount(**asdict(h)) for h in analytics.peak_times(history.snapshots)]


@router.get("/activity/daily", response_model=dict[str, int])
async def get_daily_activity(
    days: int = Query(7, ge=1, le=365),
    history: History = Depends(get_history),
) -> dict[str, int]:
    return analytics.daily_activity(history.snapshots, days)


@router.get("/activity/heatmap", response_model=dict[str, int])
async def get_activity_heatmap(history: History = Depends(get_history)) -> dict[str, int]:
    """Summed players keyed "weekday-hour" (Monday = 0)"""
    return analytics.activity_heatmap(history.snapshots)


@router.get("/activity/weekdays", response_model=list[WeekdayPattern])
async def get_weekday_patterns(history: History = Depends(get_history)) -> list[WeekdayPattern]:
    return [WeekdayPattern(**asdict(w)) for w in analytics.weekday_patterns(history.snapshots)]


@router.get("/activity/monthly-active", response_model=MonthlyActive)
async def get_monthly_active(history: History = Depends(get_history)) -> MonthlyActive:
    return MonthlyActive(players=analytics.monthly_active_players(history.snapshots))
