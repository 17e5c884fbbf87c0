"""History repository lifecycle for the API process."""

import logging

from shared.database import DatabaseManager, PoolConfig
from shared.repositories import HistoryRepository, JsonFileDocumentStore, PostgresDocumentStore

from .config import Settings

logger = logging.getLogger(__name__)

# Global instances, set up by the app lifespan
_db_manager: DatabaseManager | None = None
_repository: HistoryRepository | None = None


async def init_repository(settings: Settings) -> HistoryRepository:
    """Open the configured document store.

    The API only reads, so it never runs migrations; the collector owns the
    schema.
    """
    global _db_manager, _repository
    if settings.storage_backend == "postgres":
        _db_manager = DatabaseManager(settings.database_url, PoolConfig.for_service("api"))
        await _db_manager.connect()
        _repository = HistoryRepository(PostgresDocumentStore(_db_manager.pool))
    else:
        _repository = HistoryRepository(JsonFileDocumentStore(settings.data_dir))
    logger.info(f"Reading history from {_repository.source}")
    return _repository


async def close_repository() -> None:
    global _db_manager, _repository
    _repository = None
    if _db_manager is not None:
        await _db_manager.disconnect()
        _db_manager = None


def get_repository() -> HistoryRepository | None:
    return _repository


def get_database_manager() -> DatabaseManager | None:
    return _db_manager
