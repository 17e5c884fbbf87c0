"""The collector instance: owns all mutable history and runs one cycle at a time."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any

from shared.models import (
    DEFAULT_GAMES,
    ActivityRecord,
    GameReading,
    History,
    LobbyEvent,
    SessionRecord,
    Snapshot,
    normalize_readings,
)
from shared.repositories import DocumentStoreError, HistoryRepository

from ..trackers import LobbyTracker, NotificationDetector, SessionTracker, SocialTracker

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    snapshot: Snapshot
    events: list[LobbyEvent] = field(default_factory=list)
    sessions: list[SessionRecord] = field(default_factory=list)


class DataCollector:
    """Ingests one normalized reading per cycle and fans it out to the trackers.

    Lifecycle: ``load()`` once, then ``record_cycle()`` + ``save()`` per poll
    (or ``run_cycle()`` for both), and ``teardown()`` on shutdown. The
    trackers run synchronously inside ``record_cycle``; the only awaits are
    repository reads and writes.

    Without a repository, or after the first failed read or save, the
    instance runs in memory only for the rest of its lifetime.
    """

    def __init__(
        self,
        repository: HistoryRepository | None,
        *,
        games: Sequence[str] = DEFAULT_GAMES,
        snapshot_cap: int = 10_000,
        session_cap: int = 10_000,
        activity_cap: int = 10_000,
        session_min_minutes: int = 1,
        notification_cooldown: timedelta = timedelta(seconds=120),
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.repository = repository
        self.games = tuple(games)
        self.tz = tz

        self.snapshot_cap = snapshot_cap
        self.session_cap = session_cap
        self.activity_cap = activity_cap
        self.session_min_minutes = session_min_minutes
        self.notification_cooldown = notification_cooldown

        self.persistence_available = repository is not None
        self.cycles = 0
        self.last_cycle_at: datetime | None = None
        self._reset(History())

    def _reset(self, history: History) -> None:
        self.snapshots: deque[Snapshot] = deque(history.snapshots, maxlen=self.snapshot_cap)
        self.activity: deque[ActivityRecord] = deque(history.activity, maxlen=self.activity_cap)
        self.sessions = SessionTracker(
            history.player_stats,
            history.sessions,
            session_cap=self.session_cap,
            min_minutes=self.session_min_minutes,
        )
        self.lobbies = LobbyTracker(history.lobbies, history.game_modes)
        self.social = SocialTracker(history.social)
        self.notifications = NotificationDetector(
            history.notification_states, cooldown=self.notification_cooldown
        )

    # ==================== Lifecycle ====================

    async def load(self) -> None:
        """Replace in-memory state with the persisted history.

        A malformed document starts that collection empty. If a document
        cannot be read at all, history starts empty and nothing is written
        back, so the stored copy survives.
        """
        if self.repository is None:
            logger.warning("No history store, running in memory only")
            return

        try:
            history = await self.repository.load_history(strict=False)
        except DocumentStoreError as e:
            self.persistence_available = False
            logger.error(f"Failed to load history, continuing in memory only: {e}")
            return
        self._reset(history)
        logger.info(
            f"Loaded history from {self.repository.source}: "
            f"{len(self.snapshots)} snapshots, {len(self.sessions.player_stats)} players, "
            f"{len(self.sessions.sessions)} sessions, {len(self.lobbies.lobbies)} lobbies, "
            f"{len(self.activity)} activity records"
        )

    async def save(self) -> bool:
        """Rewrite every document. Returns False when nothing was written."""
        if self.repository is None or not self.persistence_available:
            logger.debug("Persistence unavailable, skipping save")
            return False

        try:
            await self.repository.save_history(self.history)
        except DocumentStoreError as e:
            self.persistence_available = False
            logger.error(f"Failed to save history, continuing in memory only: {e}")
            return False

        logger.debug(f"Saved history ({len(self.snapshots)} snapshots)")
        return True

    async def teardown(self) -> None:
        """Final flush before the process exits."""
        logger.info("Flushing history before shutdown")
        await self.save()

    # ==================== Cycle ====================

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def record_cycle(
        self, raw_by_game: Mapping[str, Any] | None, now: datetime | None = None
    ) -> CycleResult:
        """Normalize one poll's payloads and update every tracker."""
        now = now or self.now()
        readings = normalize_readings(raw_by_game, self.games)
        snapshot = Snapshot.from_readings(readings, now)

        self.snapshots.append(snapshot)
        self._record_activity(readings, now)
        committed = self.sessions.update(snapshot, now)
        self.lobbies.update(readings, now)
        self.social.update(snapshot)
        events = self.notifications.update(readings, now)

        self.cycles += 1
        self.last_cycle_at = now

        per_game = ", ".join(f"{g}={len(gs.players)}" for g, gs in snapshot.games.items())
        logger.info(f"Snapshot: {snapshot.total_players} unique players ({per_game})")
        return CycleResult(snapshot=snapshot, events=events, sessions=committed)

    async def run_cycle(
        self, raw_by_game: Mapping[str, Any] | None, now: datetime | None = None
    ) -> CycleResult:
        result = self.record_cycle(raw_by_game, now)
        await self.save()
        return result

    def _record_activity(self, readings: Mapping[str, GameReading], now: datetime) -> None:
        for game, reading in readings.items():
            lobby_of: dict[str, str] = {}
            for lobby in reading.lobbies:
                if not lobby.is_active:
                    continue
                for player in lobby.players:
                    lobby_of.setdefault(player, lobby.name)
            for player in reading.players:
                self.activity.append(
                    ActivityRecord(
                        player=player,
                        game=game,
                        lobby_name=lobby_of.get(player, ""),
                        timestamp=now,
                    )
                )

    def clear_notification_history(self) -> None:
        self.notifications.clear()

    # ==================== Views ====================

    @property
    def history(self) -> History:
        """Live view of every collection, in persisted form."""
        return History(
            activity=list(self.activity),
            player_stats=self.sessions.player_stats,
            snapshots=list(self.snapshots),
            lobbies=self.lobbies.lobbies,
            sessions=list(self.sessions.sessions),
            social=self.social.social,
            notification_states=self.notifications.states,
            game_modes=self.lobbies.game_modes,
        )

    def status(self) -> dict[str, Any]:
        return {
            "cycles": self.cycles,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None,
            "snapshots": len(self.snapshots),
            "players": len(self.sessions.player_stats),
            "sessions": len(self.sessions.sessions),
            "active_sessions": len(self.sessions.active),
            "lobbies": len(self.lobbies.lobbies),
            "persistence_available": self.persistence_available,
        }
