from datetime import timedelta

import pytest

from collector.trackers import LobbyTracker, SocialTracker
from shared.models import Snapshot, normalize_readings


def lobby_readings(*lobbies, game="ae"):
    return normalize_readings({game: {"lobbies": list(lobbies)}})


def test_first_observation_initializes_averages(t0):
    tracker = LobbyTracker()
    tracker.update(lobby_readings({"name": "Race", "players": ["A", "B", "C"]}), t0)

    analytics = tracker.lobbies["ae:Race"]
    assert analytics.appearances == 1
    assert analytics.average_duration == 0
    assert analytics.average_players == 3
    assert analytics.first_seen == analytics.last_seen == t0


def test_short_gaps_fold_into_running_means(t0):
    tracker = LobbyTracker()
    tracker.update(lobby_readings({"name": "Race", "players": ["A", "B", "C"]}), t0)
    later = t0 + timedelta(minutes=5)
    tracker.update(lobby_readings({"name": "Race", "players": ["A", "B", "C", "D", "E"]}), later)

    analytics = tracker.lobbies["ae:Race"]
    assert analytics.appearances == 2
    assert analytics.average_duration == pytest.approx(2.5)
    assert analytics.average_players == pytest.approx(4.0)
    assert analytics.last_seen == later
    assert analytics.first_seen == t0


def test_long_gap_is_a_restart_not_a_duration(t0):
    tracker = LobbyTracker()
    race = {"name": "Race", "players": ["A"], "config": {"game_mode": "Race"}}
    tracker.update(lobby_readings(race), t0)
    tracker.update(lobby_readings(race), t0 + timedelta(minutes=60))

    analytics = tracker.lobbies["ae:Race"]
    assert analytics.appearances == 2
    assert analytics.average_duration == 0
    assert tracker.game_modes["ae:Race"].count == 2


def test_inactive_lobbies_are_skipped(t0):
    tracker = LobbyTracker()
    tracker.update(
        lobby_readings(
            {"name": "Empty", "players": []},
            {"name": "Closed", "players": ["A"], "is_active": False},
        ),
        t0,
    )

    assert tracker.lobbies == {}


def test_game_mode_openings_record_track_laps_and_direction(t0):
    tracker = LobbyTracker()
    tracker.update(
        lobby_readings(
            {
                "name": "One",
                "players": ["A"],
                "config": {"game_mode": "Race", "track": "Canyon", "lap_count": "3", "direction": "Reverse"},
            },
            {
                "name": "Two",
                "players": ["B"],
                "config": {"game_mode": "Race", "track": "Canyon", "lap_count": "5", "direction": "Forward"},
            },
            {"name": "Three", "players": ["C"], "config": {"game_mode": "Race", "lap_count": "many"}},
            game="pr",
        ),
        t0,
    )

    stats = tracker.game_modes["pr:Race"]
    assert stats.count == 3
    assert stats.tracks == {"Canyon": 2}
    assert stats.average_laps == pytest.approx(4.0)
    assert stats.lap_samples == 2
    assert stats.directions == {"forward": 1, "reverse": 1}


def test_social_counts_every_pair_in_the_same_game(t0):
    tracker = SocialTracker()
    raw = {"ae": {"players": ["A", "B", "C"]}, "pr": {"players": ["D"]}}
    tracker.update(Snapshot.from_readings(normalize_readings(raw), t0))

    assert tracker.social["A"].co_players == {"B": 1, "C": 1}
    assert tracker.social["B"].co_players == {"A": 1, "C": 1}
    assert tracker.social["A"].most_frequent_partner == "B"
    assert "D" not in tracker.social


def test_social_most_frequent_partner_follows_counts(t0):
    tracker = SocialTracker()
    tracker.update(Snapshot.from_readings(normalize_readings({"ae": {"players": ["A", "B", "C"]}}), t0))
    tracker.update(Snapshot.from_readings(normalize_readings({"mv": {"players": ["A", "C"]}}), t0))

    assert tracker.social["A"].co_players == {"B": 1, "C": 2}
    assert tracker.social["A"].most_frequent_partner == "C"
    assert tracker.social["A"].unique_partners == 2
