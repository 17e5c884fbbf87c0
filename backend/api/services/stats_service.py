"""Loads the persisted history for the statistics endpoints."""

import logging

from shared.cache import AsyncTTLCache, cached
from shared.models import History
from shared.repositories import HistoryRepository

logger = logging.getLogger(__name__)

# History changes at most once per poll cycle
_history_cache = AsyncTTLCache(maxsize=8, ttl=30.0)


class StatsService:
    def __init__(self, repository: HistoryRepository):
        self.repository = repository

    @cached(_history_cache, key_func=lambda self: f"history:{self.repository.source}")
    async def load_history(self) -> History:
        history = await self.repository.load_history(strict=True)
        logger.debug(
            f"Loaded history from {self.repository.source} "
            f"({len(history.snapshots)} snapshots, {len(history.player_stats)} players)"
        )
        return history


def clear_history_cache() -> None:
    _history_cache.clear()
