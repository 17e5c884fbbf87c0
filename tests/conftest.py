from datetime import datetime, timezone

import pytest

from shared.repositories import DocumentStoreError, HistoryRepository, JsonFileDocumentStore

# A Monday, so weekday() == 0
T0 = datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)


class UnreadableStore:
    """JSON files where one document exists but cannot be read back."""

    def __init__(self, inner: JsonFileDocumentStore, unreadable: str):
        self.inner = inner
        self.unreadable = unreadable

    @property
    def source(self) -> str:
        return self.inner.source

    async def load(self, key):
        if key == self.unreadable:
            raise DocumentStoreError("[Errno 5] Input/output error")
        return await self.inner.load(key)

    async def save(self, key, document):
        await self.inner.save(key, document)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def json_repository(tmp_path) -> HistoryRepository:
    return HistoryRepository(JsonFileDocumentStore(tmp_path / "data"))


@pytest.fixture
def unreadable_repository(tmp_path) -> HistoryRepository:
    """Shares ``json_repository``'s directory; player-stats fails to read."""
    return HistoryRepository(UnreadableStore(JsonFileDocumentStore(tmp_path / "data"), "player-stats"))
