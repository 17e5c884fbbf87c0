"""Per-player presence counters and the Idle/Active session state machine."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from shared.models import PlayerStatistics, SessionRecord, Snapshot

logger = logging.getLogger(__name__)


@dataclass
class ActiveSession:
    game: str
    start: datetime


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two instants, floored."""
    return int((end - start).total_seconds() // 60)


class SessionTracker:
    """Opens a session the first cycle a player is seen, closes it when they vanish.

    Sessions shorter than ``min_minutes`` are dropped without touching the
    player's statistics. Open sessions live only in memory.
    """

    def __init__(
        self,
        player_stats: dict[str, PlayerStatistics] | None = None,
        sessions: Iterable[SessionRecord] = (),
        *,
        session_cap: int = 10_000,
        min_minutes: int = 1,
    ) -> None:
        self.player_stats: dict[str, PlayerStatistics] = player_stats if player_stats is not None else {}
        self.sessions: deque[SessionRecord] = deque(sessions, maxlen=session_cap)
        self.active: dict[str, ActiveSession] = {}
        self.min_minutes = min_minutes

    def update(self, snapshot: Snapshot, now: datetime) -> list[SessionRecord]:
        """Apply one cycle; return the sessions committed during it."""
        self._record_presence(snapshot, now)

        present = snapshot.all_players()
        for player in sorted(present):
            if player in self.active:
                continue
            game = snapshot.first_game_for(player)
            if game is None:
                continue
            self.active[player] = ActiveSession(game=game, start=now)
            logger.info(f"[Session Start] {player} in {game}")

        committed: list[SessionRecord] = []
        for player in [p for p in self.active if p not in present]:
            record = self._close(player, now)
            if record is not None:
                committed.append(record)
        return committed

    def _record_presence(self, snapshot: Snapshot, now: datetime) -> None:
        hour = now.hour
        weekday = now.weekday()
        for game, players in snapshot.players_by_game():
            for player in players:
                stats = self.player_stats.get(player)
                if stats is None:
                    stats = PlayerStatistics(first_seen=now, last_seen=now)
                    self.player_stats[player] = stats
                stats.games[game] = stats.games.get(game, 0) + 1
                stats.peak_hours[hour] = stats.peak_hours.get(hour, 0) + 1
                stats.peak_days[weekday] = stats.peak_days.get(weekday, 0) + 1
                stats.last_seen = now

    def _close(self, player: str, now: datetime) -> SessionRecord | None:
        session = self.active.pop(player)
        duration = elapsed_minutes(session.start, now)
        if duration < self.min_minutes:
            logger.debug(f"Discarding {duration}m blip for {player}")
            return None

        record = SessionRecord(
            player=player,
            game=session.game,
            start=session.start,
            end=now,
            duration_minutes=duration,
        )
        self.sessions.append(record)

        stats = self.player_stats.get(player)
        if stats is None:
            stats = PlayerStatistics(first_seen=session.start, last_seen=now)
            self.player_stats[player] = stats
        stats.total_sessions += 1
        stats.total_minutes += duration
        stats.playtime_by_game[session.game] = stats.playtime_by_game.get(session.game, 0) + duration
        stats.average_session_length = stats.total_minutes / stats.total_sessions
        stats.longest_session = max(stats.longest_session, duration)

        logger.info(f"[Session End] {player} played {session.game} for {duration}m")
        return record
