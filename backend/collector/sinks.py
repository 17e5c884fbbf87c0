"""Delivery of lobby events to the outside world.

Sinks only move the event payload; formatting belongs to whoever receives it.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from shared.models import LobbyEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    async def send(self, event: LobbyEvent) -> None: ...


class LoggingEventSink:
    async def send(self, event: LobbyEvent) -> None:
        players = ", ".join(event.players) or "-"
        logger.info(
            f"[bold cyan]{event.kind.upper()}[/bold cyan] [{event.game}] {event.lobby_name} "
            f"{event.player_count}/{event.max_players}: {players}",
            extra={"markup": True},
        )


class WebhookEventSink:
    """POST each event as JSON to a configured URL."""

    def __init__(self, url: str, client: httpx.AsyncClient) -> None:
        self.url = url
        self._http = client

    async def send(self, event: LobbyEvent) -> None:
        response = await self._http.post(self.url, json=event.to_dict())
        response.raise_for_status()


async def dispatch(events: list[LobbyEvent], sinks: list[EventSink]) -> int:
    """Send every event to every sink; failures are logged, never retried.

    Returns the number of failed deliveries.
    """
    failures = 0
    for event in events:
        for sink in sinks:
            try:
                await sink.send(event)
            except httpx.HTTPError as e:
                failures += 1
                logger.warning(
                    f"Failed to deliver {event.kind} event for {event.lobby_name} "
                    f"via {type(sink).__name__}: {type(e).__name__}: {e}"
                )
    return failures
