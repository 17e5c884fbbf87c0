from datetime import timedelta

import pytest

from collector.core import DataCollector
from shared.repositories import DocumentStoreError, HistoryRepository


class FailingStore:
    source = "failing"

    def __init__(self):
        self.saves = 0

    async def load(self, key):
        return None

    async def save(self, key, document):
        self.saves += 1
        raise DocumentStoreError("disk full")


def race(*players):
    return {"name": "Bob's Race", "players": list(players), "max_players": 8, "config": {"game_mode": "Race"}}


def test_record_cycle_fans_out_to_every_tracker(json_repository, t0):
    collector = DataCollector(json_repository)

    first = collector.record_cycle({"ae": {"players": ["Alice", "Bob"], "lobbies": [race("Alice", "Bob")]}}, t0)
    later = t0 + timedelta(minutes=10)
    second = collector.record_cycle({"ae": {"players": []}}, later)

    assert first.snapshot.total_players == 2
    assert [e.kind for e in first.events] == ["new"]
    assert sorted(r.player for r in second.sessions) == ["Alice", "Bob"]
    assert len(collector.snapshots) == 2
    assert "ae:Bob's Race" in collector.lobbies.lobbies
    assert collector.social.social["Alice"].co_players == {"Bob": 1}
    assert collector.status()["cycles"] == 2


def test_activity_records_lobby_membership(json_repository, t0):
    collector = DataCollector(json_repository)

    collector.record_cycle({"ae": {"players": ["Alice", "Bob"], "lobbies": [race("Alice")]}}, t0)

    lobby_of = {record.player: record.lobby_name for record in collector.activity}
    assert lobby_of == {"Alice": "Bob's Race", "Bob": ""}


def test_bounded_snapshot_history(json_repository, t0):
    collector = DataCollector(json_repository, snapshot_cap=3)

    for i in range(5):
        collector.record_cycle({"ae": {"players": [f"P{i}"]}}, t0 + timedelta(minutes=5 * i))

    assert len(collector.snapshots) == 3
    assert collector.snapshots[0].timestamp == t0 + timedelta(minutes=10)


async def test_history_survives_a_restart(json_repository, t0):
    collector = DataCollector(json_repository)
    collector.record_cycle({"pr": {"players": ["Alice"], "lobbies": [race("Alice")]}}, t0)
    collector.record_cycle({"pr": {"players": []}}, t0 + timedelta(minutes=20))
    assert await collector.save() is True

    restored = DataCollector(json_repository)
    await restored.load()

    assert len(restored.snapshots) == 2
    assert restored.sessions.player_stats["Alice"].total_minutes == 20
    assert [r.duration_minutes for r in restored.sessions.sessions] == [20]
    assert restored.lobbies.game_modes["pr:Race"].count == 1
    assert "pr:Bob's Race" in restored.notifications.states


async def test_failed_save_degrades_to_memory_only(t0):
    store = FailingStore()
    collector = DataCollector(HistoryRepository(store))

    result = await collector.run_cycle({"ae": {"players": ["Alice"]}}, t0)
    assert result.snapshot.total_players == 1
    assert collector.persistence_available is False
    assert store.saves == 1

    collector.record_cycle({"ae": {"players": ["Alice", "Bob"]}}, t0 + timedelta(minutes=5))
    assert await collector.save() is False
    assert store.saves == 1
    assert len(collector.snapshots) == 2


async def test_corrupt_document_starts_that_collection_empty(json_repository, tmp_path, t0):
    collector = DataCollector(json_repository)
    collector.record_cycle({"ae": {"players": ["Alice"]}}, t0)
    await collector.save()

    (tmp_path / "data" / "snapshots.json").write_text("{not json", encoding="utf-8")

    restored = DataCollector(json_repository)
    await restored.load()

    assert len(restored.snapshots) == 0
    assert "Alice" in restored.sessions.player_stats

    with pytest.raises(DocumentStoreError):
        await json_repository.load_history()


def test_clear_notification_history_allows_new_alerts(json_repository, t0):
    collector = DataCollector(json_repository)
    collector.record_cycle({"ae": {"lobbies": [race("Bob")]}}, t0)

    collector.clear_notification_history()
    result = collector.record_cycle({"ae": {"lobbies": [race("Bob")]}}, t0 + timedelta(minutes=5))

    assert [e.kind for e in result.events] == ["new"]


async def test_unreadable_history_is_never_overwritten(json_repository, unreadable_repository, t0):
    collector = DataCollector(json_repository)
    collector.record_cycle({"ae": {"players": ["Alice"]}}, t0)
    await collector.save()

    restarted = DataCollector(unreadable_repository)
    await restarted.load()
    await restarted.run_cycle({"ae": {"players": ["Bob"]}}, t0 + timedelta(minutes=5))

    assert restarted.persistence_available is False
    assert "Bob" in restarted.sessions.player_stats
    stored = await json_repository.load_player_stats()
    assert list(stored) == ["Alice"]
    assert len(await json_repository.load_snapshots()) == 1


async def test_collector_without_repository_runs_in_memory(t0):
    collector = DataCollector(None)
    await collector.load()

    result = await collector.run_cycle({"ae": {"players": ["Alice"]}}, t0)

    assert result.snapshot.total_players == 1
    assert collector.persistence_available is False
    assert await collector.save() is False
    await collector.teardown()
