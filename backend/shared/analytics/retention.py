"""New vs returning players over a trailing window."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from shared.models import SessionRecord
from shared.models.stats import RetentionMetrics

from .common import resolve_now


def retention_metrics(
    sessions: Iterable[SessionRecord], days: int = 7, now: datetime | None = None
) -> RetentionMetrics:
    """Classify every player with a session starting inside the window.

    A player is new when their earliest recorded session starts inside the
    window, returning otherwise. An empty window yields all zeros.
    """
    cutoff = resolve_now(now) - timedelta(days=days)

    first_start: dict[str, datetime] = {}
    in_window: set[str] = set()
    for record in sessions:
        earliest = first_start.get(record.player)
        if earliest is None or record.start < earliest:
            first_start[record.player] = record.start
        if record.start >= cutoff:
            in_window.add(record.player)

    if not in_window:
        return RetentionMetrics()

    new_players = sum(1 for player in in_window if first_start[player] >= cutoff)
    returning_players = len(in_window) - new_players
    retention_rate = returning_players / len(in_window) * 100
    return RetentionMetrics(
        new_players=new_players,
        returning_players=returning_players,
        retention_rate=retention_rate,
        churn_rate=100 - retention_rate,
    )
