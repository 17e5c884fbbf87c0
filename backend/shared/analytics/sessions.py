"""Session-based queries: per-player session stats, streaks and summaries."""

from __future__ import annotations

from collections.abc import Iterable

from shared.models import SessionRecord
from shared.models.stats import PlayerSessionStats, SessionSummary, StreakHolder

from .common import DAY


def sessions_by_player(sessions: Iterable[SessionRecord]) -> dict[str, list[SessionRecord]]:
    """Group sessions per player, each list sorted by start time."""
    grouped: dict[str, list[SessionRecord]] = {}
    for record in sessions:
        grouped.setdefault(record.player, []).append(record)
    for records in grouped.values():
        records.sort(key=lambda r: r.start)
    return grouped


def streaks(records: list[SessionRecord]) -> tuple[int, int]:
    """Return ``(current, longest)`` streaks over start-sorted sessions.

    Consecutive session starts at most one whole day apart extend the
    streak; a longer gap resets it to 1.
    """
    if not records:
        return 0, 0
    current = longest = 1
    for previous, record in zip(records, records[1:]):
        day_diff = (record.start - previous.start) // DAY
        if day_diff <= 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return current, longest


def player_session_stats(sessions: Iterable[SessionRecord], player: str) -> PlayerSessionStats | None:
    records = sessions_by_player(r for r in sessions if r.player == player).get(player)
    if not records:
        return None

    durations = [r.duration_minutes for r in records]
    current, _ = streaks(records)
    return PlayerSessionStats(
        total_sessions=len(records),
        average_session_length=sum(durations) / len(durations),
        longest_session=max(durations),
        shortest_session=min(durations),
        streak_days=current,
        last_session_end=records[-1].end,
    )


def session_summary(sessions: Iterable[SessionRecord]) -> SessionSummary:
    records = list(sessions)
    if not records:
        return SessionSummary()

    longest = records[0]
    for record in records[1:]:
        if record.duration_minutes > longest.duration_minutes:
            longest = record
    return SessionSummary(
        total_sessions=len(records),
        average_length=sum(r.duration_minutes for r in records) / len(records),
        longest_player=longest.player,
        longest_duration=longest.duration_minutes,
    )


def longest_active_streak(sessions: Iterable[SessionRecord]) -> StreakHolder | None:
    best: StreakHolder | None = None
    for player, records in sessions_by_player(sessions).items():
        _, longest = streaks(records)
        if best is None or longest > best.days:
            best = StreakHolder(player=player, days=longest)
    return best
