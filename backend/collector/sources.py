"""Upstream game adapters.

Each source returns the raw ``{players, lobbies}`` payload for one game, or
``None`` when the game could not be read this cycle. Shape checking happens
later, in ``shared.models.snapshot.normalize_reading``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


class GameSource(Protocol):
    game: str

    async def fetch(self) -> Any: ...


class HttpGameSource:
    """GET a JSON feed that already speaks the ``{players, lobbies}`` shape."""

    def __init__(self, game: str, url: str, client: httpx.AsyncClient) -> None:
        self.game = game
        self.url = url
        self._http = client

    async def fetch(self) -> Any:
        try:
            response = await self._http.get(self.url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.warning(f"[{self.game}] fetch failed: {type(e).__name__}: {e}")
        except ValueError as e:
            logger.warning(f"[{self.game}] invalid JSON from {self.url}: {e}")
        return None


def build_sources(game_sources: Mapping[str, str], client: httpx.AsyncClient) -> list[HttpGameSource]:
    return [HttpGameSource(game, url, client) for game, url in game_sources.items()]


async def fetch_all(sources: list[GameSource], timeout: float) -> dict[str, Any]:
    """Fetch every source concurrently; failed or late games are left out."""
    if not sources:
        return {}

    async def _fetch(source: GameSource) -> Any:
        return await asyncio.wait_for(source.fetch(), timeout=timeout)

    results = await asyncio.gather(*(_fetch(s) for s in sources), return_exceptions=True)

    payloads: dict[str, Any] = {}
    for source, result in zip(sources, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning(f"[{source.game}] fetch failed: {type(result).__name__}: {result}")
            continue
        if result is not None:
            payloads[source.game] = result
    return payloads
