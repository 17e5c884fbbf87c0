"""Repository mapping the persisted history documents to model objects."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from shared.models import (
    ActivityRecord,
    GameModeStats,
    History,
    LobbyAnalytics,
    NotificationState,
    PlayerStatistics,
    SessionRecord,
    Snapshot,
    SocialStats,
)

from .documents import DocumentDecodeError, DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Document keys, one per collection
ACTIVITY = "activity"
PLAYER_STATS = "player-stats"
SNAPSHOTS = "snapshots"
LOBBY_ANALYTICS = "lobby-analytics"
SESSIONS = "sessions"
SOCIAL = "social"
NOTIFICATION_STATE = "notification-state"
GAME_MODES = "game-modes"

DOCUMENT_KEYS = (
    ACTIVITY,
    PLAYER_STATS,
    SNAPSHOTS,
    LOBBY_ANALYTICS,
    SESSIONS,
    SOCIAL,
    NOTIFICATION_STATE,
    GAME_MODES,
)


class HistoryRepository:
    """Typed load/save for every history collection.

    A document that cannot be read raises ``DocumentStoreError``; one that
    was read but is malformed raises its subclass ``DocumentDecodeError``,
    and callers decide whether to fall back to an empty collection.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    @property
    def source(self) -> str:
        return self.store.source

    # ==================== Generic helpers ====================

    async def _load_list(self, key: str, decode: Callable[[Mapping[str, Any]], T]) -> list[T]:
        document = await self.store.load(key)
        if document is None:
            return []
        if not isinstance(document, list):
            raise DocumentDecodeError(f"Document {key} should be a list")
        try:
            return [decode(item) for item in document]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DocumentDecodeError(f"Document {key} is malformed: {e}") from e

    async def _load_map(
        self, key: str, decode: Callable[[Mapping[str, Any]], T]
    ) -> dict[str, T]:
        document = await self.store.load(key)
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise DocumentDecodeError(f"Document {key} should be an object")
        try:
            return {str(k): decode(v) for k, v in document.items()}
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DocumentDecodeError(f"Document {key} is malformed: {e}") from e

    async def _save_list(self, key: str, items: Iterable[Any]) -> None:
        await self.store.save(key, [item.to_dict() for item in items])

    async def _save_map(self, key: str, items: Mapping[str, Any]) -> None:
        await self.store.save(key, {k: v.to_dict() for k, v in items.items()})

    # ==================== Loaders ====================

    async def load_activity(self) -> list[ActivityRecord]:
        return await self._load_list(ACTIVITY, ActivityRecord.from_dict)

    async def load_player_stats(self) -> dict[str, PlayerStatistics]:
        return await self._load_map(PLAYER_STATS, PlayerStatistics.from_dict)

    async def load_snapshots(self) -> list[Snapshot]:
        return await self._load_list(SNAPSHOTS, Snapshot.from_dict)

    async def load_lobbies(self) -> dict[str, LobbyAnalytics]:
        return await self._load_map(LOBBY_ANALYTICS, LobbyAnalytics.from_dict)

    async def load_sessions(self) -> list[SessionRecord]:
        return await self._load_list(SESSIONS, SessionRecord.from_dict)

    async def load_social(self) -> dict[str, SocialStats]:
        return await self._load_map(SOCIAL, SocialStats.from_dict)

    async def load_notification_states(self) -> dict[str, NotificationState]:
        return await self._load_map(NOTIFICATION_STATE, NotificationState.from_dict)

    async def load_game_modes(self) -> dict[str, GameModeStats]:
        return await self._load_map(GAME_MODES, GameModeStats.from_dict)

    async def load_history(self, *, strict: bool = True) -> History:
        """Load every collection.

        With ``strict=False`` a malformed document is logged and replaced by
        an empty collection instead of raising. Read failures always raise:
        the stored document may still be intact and must not be overwritten.
        """
        loaders: dict[str, Callable[[], Any]] = {
            "activity": self.load_activity,
            "player_stats": self.load_player_stats,
            "snapshots": self.load_snapshots,
            "lobbies": self.load_lobbies,
            "sessions": self.load_sessions,
            "social": self.load_social,
            "notification_states": self.load_notification_states,
            "game_modes": self.load_game_modes,
        }

        history = History()
        for attr, loader in loaders.items():
            try:
                setattr(history, attr, await loader())
            except DocumentDecodeError as e:
                if strict:
                    raise
                logger.error(f"Failed to load {attr}, starting empty: {e}")
        return history

    # ==================== Writers ====================

    async def save_history(self, history: History) -> None:
        await self._save_list(ACTIVITY, history.activity)
        await self._save_map(PLAYER_STATS, history.player_stats)
        await self._save_list(SNAPSHOTS, history.snapshots)
        await self._save_map(LOBBY_ANALYTICS, history.lobbies)
        await self._save_list(SESSIONS, history.sessions)
        await self._save_map(SOCIAL, history.social)
        await self._save_map(NOTIFICATION_STATE, history.notification_states)
        await self._save_map(GAME_MODES, history.game_modes)
