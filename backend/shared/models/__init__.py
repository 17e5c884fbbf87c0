"""Shared data models for the lobbywatch services."""

from .history import History
from .lobby import GameModeStats, LobbyAnalytics, LobbyEvent, NotificationState, lobby_key
from .player import ActivityRecord, PlayerStatistics, SessionRecord
from .snapshot import (
    DEFAULT_GAMES,
    MAIN_MENU,
    GameReading,
    GameSnapshot,
    Lobby,
    LobbyConfig,
    Snapshot,
    normalize_reading,
    normalize_readings,
)
from .social import SocialStats

__all__ = [
    "DEFAULT_GAMES",
    "MAIN_MENU",
    "ActivityRecord",
    "GameModeStats",
    "GameReading",
    "GameSnapshot",
    "History",
    "Lobby",
    "LobbyAnalytics",
    "LobbyConfig",
    "LobbyEvent",
    "NotificationState",
    "PlayerStatistics",
    "SessionRecord",
    "Snapshot",
    "SocialStats",
    "lobby_key",
    "normalize_reading",
    "normalize_readings",
]
