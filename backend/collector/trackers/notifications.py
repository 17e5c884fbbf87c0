"""Detects lobbies that just opened or reopened."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta

from shared.models import MAIN_MENU, GameReading, LobbyEvent, NotificationState, lobby_key

logger = logging.getLogger(__name__)


class NotificationDetector:
    """Emits "new" and "reopened" events from lobby occupancy transitions.

    State is overwritten for every listed lobby each cycle, whether or not an
    event fired. A lobby that stops being listed keeps its last state.
    """

    def __init__(
        self,
        states: dict[str, NotificationState] | None = None,
        *,
        cooldown: timedelta = timedelta(seconds=120),
    ) -> None:
        self.states: dict[str, NotificationState] = states if states is not None else {}
        self.cooldown = cooldown

    def update(self, readings: Mapping[str, GameReading], now: datetime) -> list[LobbyEvent]:
        events: list[LobbyEvent] = []
        for game, reading in readings.items():
            for lobby in reading.lobbies:
                if lobby.name == MAIN_MENU:
                    continue

                key = lobby_key(game, lobby.name)
                previous = self.states.get(key)

                if lobby.has_players:
                    if previous is None:
                        events.append(LobbyEvent.from_lobby("new", game, lobby))
                        logger.info(f"New lobby: [{game}] {lobby.name} ({lobby.player_count} players)")
                    elif (
                        not previous.players
                        and lobby.players
                        and now - previous.timestamp > self.cooldown
                    ):
                        events.append(LobbyEvent.from_lobby("reopened", game, lobby))
                        logger.info(f"Lobby reopened: [{game}] {lobby.name} ({lobby.player_count} players)")

                self.states[key] = NotificationState(players=list(lobby.players), timestamp=now)
        return events

    def clear(self) -> None:
        """Forget every lobby; the next active sighting fires "new" again."""
        self.states.clear()
        logger.info("Notification history cleared")
