import asyncio

import pytest

from collector import main
from collector.core import DataCollector
from collector.core.config import CollectorSettings
from shared.database import DatabaseManager
from shared.repositories import DOCUMENT_KEYS, HistoryRepository, JsonFileDocumentStore


class CountingStore(JsonFileDocumentStore):
    def __init__(self, path):
        super().__init__(path)
        self.saves = 0

    async def save(self, key, document):
        self.saves += 1
        await super().save(key, document)


class LobbyFeed:
    game = "ae"

    async def fetch(self):
        return {
            "players": ["Alice", "Bob"],
            "lobbies": [{"name": "Bob's Race", "players": ["Alice", "Bob"], "max_players": 8}],
        }


class StopOnEvent:
    def __init__(self, stop: asyncio.Event):
        self.stop = stop
        self.events = []

    async def send(self, event):
        self.events.append(event)
        self.stop.set()


def settings(**overrides) -> CollectorSettings:
    return CollectorSettings(_env_file=None, poll_interval=30, fetch_timeout=1, **overrides)


async def test_run_collector_polls_until_stopped_then_flushes(tmp_path):
    store = CountingStore(tmp_path)
    collector = DataCollector(HistoryRepository(store))
    stop = asyncio.Event()
    sink = StopOnEvent(stop)

    await asyncio.wait_for(main.run_collector(collector, [LobbyFeed()], [sink], settings(), stop), timeout=5)

    assert collector.cycles == 1
    assert [e.kind for e in sink.events] == ["new"]
    # one save per cycle, one more on teardown
    assert store.saves == 2 * len(DOCUMENT_KEYS)
    assert sorted(p.stem for p in tmp_path.glob("*.json")) == sorted(DOCUMENT_KEYS)


async def test_run_collector_flushes_when_the_loop_fails(tmp_path, monkeypatch):
    async def failing_dispatch(events, sinks):
        raise RuntimeError("dispatch bug")

    monkeypatch.setattr(main, "dispatch", failing_dispatch)
    store = CountingStore(tmp_path)
    collector = DataCollector(HistoryRepository(store))

    with pytest.raises(RuntimeError, match="dispatch bug"):
        await main.run_collector(collector, [LobbyFeed()], [], settings(), asyncio.Event())

    assert store.saves == 2 * len(DOCUMENT_KEYS)


async def test_unreachable_postgres_falls_back_to_memory(monkeypatch):
    async def refuse(self):
        raise ConnectionRefusedError(111, "Connection refused")

    monkeypatch.setattr(DatabaseManager, "connect", refuse)

    repository, db = await main.build_repository(
        settings(storage_backend="postgres", database_url="postgresql://lobby@127.0.0.1:1/lobbywatch")
    )

    assert repository is None
    assert db is None

    collector = DataCollector(repository)
    await collector.load()
    result = await collector.run_cycle({"ae": {"players": ["Alice"]}})
    assert result.snapshot.total_players == 1
    assert collector.persistence_available is False


async def test_json_backend_builds_file_repository(tmp_path):
    repository, db = await main.build_repository(settings(data_dir=tmp_path))

    assert repository.source == str(tmp_path)
    assert db is None
