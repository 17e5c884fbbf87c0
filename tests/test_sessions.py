from datetime import timedelta

from collector.trackers import SessionTracker
from shared.models import Snapshot, normalize_readings


def snap(when, **players_by_game):
    raw = {game: {"players": players} for game, players in players_by_game.items()}
    return Snapshot.from_readings(normalize_readings(raw), when)


def test_players_open_sessions_in_first_game(t0):
    tracker = SessionTracker()
    snapshot = snap(t0, ae=["Alice", "Bob"])

    committed = tracker.update(snapshot, t0)

    assert snapshot.total_players == 2
    assert committed == []
    assert set(tracker.active) == {"Alice", "Bob"}
    assert tracker.active["Alice"].game == "ae"
    assert tracker.active["Alice"].start == t0


def test_session_commits_after_player_leaves(t0):
    tracker = SessionTracker()
    for i in range(3):
        now = t0 + timedelta(minutes=5 * i)
        tracker.update(snap(now, ae=["Alice"]), now)

    end = t0 + timedelta(minutes=15)
    committed = tracker.update(snap(end), end)

    assert len(committed) == 1
    record = committed[0]
    assert (record.player, record.game, record.duration_minutes) == ("Alice", "ae", 15)
    assert record.start == t0
    assert record.end == end

    stats = tracker.player_stats["Alice"]
    assert stats.total_sessions == 1
    assert stats.total_minutes == 15
    assert stats.average_session_length == 15
    assert stats.longest_session == 15
    assert stats.playtime_by_game == {"ae": 15}
    assert "Alice" not in tracker.active


def test_presence_counters_update_every_cycle(t0):
    tracker = SessionTracker()
    tracker.update(snap(t0, ae=["Alice"], pr=["Alice"]), t0)
    later = t0 + timedelta(minutes=5)
    tracker.update(snap(later, ae=["Alice"]), later)

    stats = tracker.player_stats["Alice"]
    assert stats.games == {"ae": 2, "pr": 1}
    assert stats.peak_hours == {12: 3}
    assert stats.peak_days == {0: 3}
    assert stats.first_seen == t0
    assert stats.last_seen == later
    assert stats.total_sessions == 0


def test_blip_shorter_than_noise_floor_is_discarded(t0):
    tracker = SessionTracker()
    tracker.update(snap(t0, ae=["Alice"]), t0)
    gone = t0 + timedelta(seconds=59)

    committed = tracker.update(snap(gone), gone)

    assert committed == []
    assert len(tracker.sessions) == 0
    assert tracker.player_stats["Alice"].total_sessions == 0
    assert tracker.player_stats["Alice"].total_minutes == 0
    assert "Alice" not in tracker.active


def test_duration_is_floored_to_whole_minutes(t0):
    tracker = SessionTracker()
    tracker.update(snap(t0, ae=["Alice"]), t0)
    gone = t0 + timedelta(minutes=7, seconds=59)

    [record] = tracker.update(snap(gone), gone)

    assert record.duration_minutes == 7


def test_total_minutes_matches_committed_sessions(t0):
    tracker = SessionTracker()
    presence = [True, True, False, True, False, False, True, True, True, False]
    for i, present in enumerate(presence):
        now = t0 + timedelta(minutes=5 * i)
        tracker.update(snap(now, apoc=["Alice"] if present else []), now)

    records = [r for r in tracker.sessions if r.player == "Alice"]
    stats = tracker.player_stats["Alice"]
    assert [r.duration_minutes for r in records] == [10, 5, 15]
    assert stats.total_minutes == sum(r.duration_minutes for r in records)
    assert stats.total_sessions == 3
    assert stats.average_session_length == 10
    assert stats.longest_session == 15


def test_session_history_is_bounded(t0):
    tracker = SessionTracker(session_cap=2)
    now = t0
    for _ in range(3):
        tracker.update(snap(now, ae=["Alice"]), now)
        now += timedelta(minutes=5)
        tracker.update(snap(now), now)
        now += timedelta(minutes=5)

    assert len(tracker.sessions) == 2
    assert tracker.player_stats["Alice"].total_sessions == 3
