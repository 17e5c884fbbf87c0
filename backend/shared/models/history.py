"""In-memory bundle of every persisted collection."""

from __future__ import annotations

from dataclasses import dataclass, field

from .lobby import GameModeStats, LobbyAnalytics, NotificationState
from .player import ActivityRecord, PlayerStatistics, SessionRecord
from .snapshot import Snapshot
from .social import SocialStats


@dataclass
class History:
    activity: list[ActivityRecord] = field(default_factory=list)
    player_stats: dict[str, PlayerStatistics] = field(default_factory=dict)
    snapshots: list[Snapshot] = field(default_factory=list)
    lobbies: dict[str, LobbyAnalytics] = field(default_factory=dict)
    sessions: list[SessionRecord] = field(default_factory=list)
    social: dict[str, SocialStats] = field(default_factory=dict)
    notification_states: dict[str, NotificationState] = field(default_factory=dict)
    game_modes: dict[str, GameModeStats] = field(default_factory=dict)
