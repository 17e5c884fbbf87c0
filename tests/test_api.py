import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.core.dependencies import get_history_repository
from api.services import clear_history_cache
from collector.core import DataCollector


@pytest.fixture
def client(json_repository):
    now = datetime.now(timezone.utc)
    collector = DataCollector(json_repository)
    race = {"name": "Bob's Race", "players": ["Alice", "Bob"], "config": {"game_mode": "Race"}}
    collector.record_cycle({"ae": {"players": ["Alice", "Bob"], "lobbies": [race]}}, now - timedelta(minutes=30))
    collector.record_cycle({"ae": {"players": ["Alice"]}}, now - timedelta(minutes=20))
    collector.record_cycle({"ae": {"players": []}}, now - timedelta(minutes=10))
    asyncio.run(collector.save())

    clear_history_cache()
    app = create_app()
    app.dependency_overrides[get_history_repository] = lambda: json_repository
    yield TestClient(app)
    clear_history_cache()


def test_top_players(client):
    response = client.get("/api/stats/players/top")

    assert response.status_code == 200
    assert [(row["name"], row["value"]) for row in response.json()] == [("Alice", 2), ("Bob", 1)]


def test_player_profile(client):
    profile = client.get("/api/stats/players/by-name/Alice").json()

    assert profile["statistics"]["total_minutes"] == 20
    assert profile["sessions"]["total_sessions"] == 1
    assert profile["social"]["co_players"] == {"Bob": 1}
    assert profile["social"]["unique_partners"] == 1


def test_unknown_player_is_404(client):
    assert client.get("/api/stats/players/by-name/Nobody").status_code == 404


def test_players_named_like_other_routes_are_reachable(json_repository, t0):
    collector = DataCollector(json_repository)
    collector.record_cycle({"ae": {"players": ["top", "cross-game", "a/b"]}}, t0)
    asyncio.run(collector.save())

    clear_history_cache()
    app = create_app()
    app.dependency_overrides[get_history_repository] = lambda: json_repository
    client = TestClient(app)

    for name in ("top", "cross-game", "a/b"):
        response = client.get(f"/api/stats/players/by-name/{name}")
        assert response.status_code == 200
        assert response.json()["name"] == name
    clear_history_cache()


def test_leaderboards(client):
    streak = client.get("/api/stats/leaderboards/streak").json()
    assert [(row["name"], row["value"]) for row in streak] == [("Alice", 1), ("Bob", 1)]

    assert client.get("/api/stats/leaderboards/popularity").status_code == 422


def test_retention_counts_first_time_players_as_new(client):
    retention = client.get("/api/stats/retention").json()

    assert retention == {"new_players": 2, "returning_players": 0, "retention_rate": 0.0, "churn_rate": 100.0}


def test_prediction_is_null_without_enough_history(client):
    response = client.get("/api/stats/prediction")

    assert response.status_code == 200
    assert response.json() is None


def test_lobby_and_game_mode_views(client):
    summary = client.get("/api/stats/lobbies/summary").json()
    modes = client.get("/api/stats/game-modes", params={"game": "ae"}).json()

    assert summary["total_lobbies"] == 1
    assert summary["top_hosts"] == [{"name": "Bob", "count": 1}]
    assert [(m["mode"], m["count"]) for m in modes] == [("Race", 1)]


def test_recent_activity_and_weekday_views(client):
    recent = client.get("/api/stats/activity/recent").json()
    weekdays = client.get("/api/stats/activity/weekdays").json()

    assert [s["total_players"] for s in recent] == [2, 1, 0]
    assert len(weekdays) == 7
    assert client.get("/api/stats/activity/monthly-active").json() == {"players": 2}


def test_health_does_not_touch_storage(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_repository_is_503():
    clear_history_cache()
    app = create_app()

    assert TestClient(app).get("/api/stats/players/top").status_code == 503
