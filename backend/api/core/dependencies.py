"""Dependency injection utilities for FastAPI"""

import logging

from fastapi import Depends, HTTPException

from shared.models import History
from shared.repositories import HistoryRepository

from ..services import StatsService
from .database import get_repository

logger = logging.getLogger(__name__)


def get_history_repository() -> HistoryRepository:
    repository = get_repository()
    if repository is None:
        raise HTTPException(status_code=503, detail="History store not ready")
    return repository


def get_stats_service(
    repository: HistoryRepository = Depends(get_history_repository),
) -> StatsService:
    return StatsService(repository)


async def get_history(service: StatsService = Depends(get_stats_service)) -> History:
    """Cached history snapshot; unreadable storage becomes a 500"""
    try:
        return await service.load_history()
    except Exception as e:
        logger.exception(f"Failed to load history: {e}")
        raise HTTPException(status_code=500, detail="Failed to load history") from None
