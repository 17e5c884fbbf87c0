"""Hour-of-day and weekday patterns, including the peak-time prediction."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from shared.models import Snapshot
from shared.models.stats import HourCount, PredictiveData, Trend, WeekdayPattern

from .common import WEEKDAY_NAMES, resolve_now, since

MIN_PREDICTION_SNAPSHOTS = 24
TREND_WINDOW = 12


def recent_snapshots(snapshots: Sequence[Snapshot], hours: int = 24, now: datetime | None = None) -> list[Snapshot]:
    return since(snapshots, resolve_now(now) - timedelta(hours=hours))


def peak_times(snapshots: Sequence[Snapshot]) -> list[HourCount]:
    """Distinct players ever seen at each hour of day, hours without data omitted."""
    per_hour: dict[int, set[str]] = {}
    for snapshot in snapshots:
        per_hour.setdefault(snapshot.timestamp.hour, set()).update(snapshot.all_players())
    return [HourCount(hour=hour, count=len(players)) for hour, players in sorted(per_hour.items())]


def activity_heatmap(snapshots: Sequence[Snapshot]) -> dict[str, int]:
    """Summed totals keyed ``"<weekday>-<hour>"`` (Monday is 0)."""
    heatmap: dict[str, int] = {}
    for snapshot in snapshots:
        key = f"{snapshot.timestamp.weekday()}-{snapshot.timestamp.hour}"
        heatmap[key] = heatmap.get(key, 0) + snapshot.total_players
    return heatmap


def weekday_patterns(snapshots: Sequence[Snapshot]) -> list[WeekdayPattern]:
    """Distinct players per weekday divided by that weekday's snapshot count."""
    players: dict[int, set[str]] = {}
    counts: dict[int, int] = {}
    for snapshot in snapshots:
        weekday = snapshot.timestamp.weekday()
        players.setdefault(weekday, set()).update(snapshot.all_players())
        counts[weekday] = counts.get(weekday, 0) + 1

    return [
        WeekdayPattern(
            weekday=weekday,
            day=name,
            average_players=len(players.get(weekday, ())) / counts[weekday] if counts.get(weekday) else 0.0,
        )
        for weekday, name in enumerate(WEEKDAY_NAMES)
    ]


def _mean_total(snapshots: Sequence[Snapshot]) -> float:
    return sum(s.total_players for s in snapshots) / TREND_WINDOW


def predict_peak_time(snapshots: Sequence[Snapshot]) -> PredictiveData | None:
    """Predict the busiest hour from per-hour average totals.

    Needs at least 24 snapshots. The trend compares the latest 12 snapshots
    with the 12 before them.
    """
    if len(snapshots) < MIN_PREDICTION_SNAPSHOTS:
        return None

    totals = [0] * 24
    counts = [0] * 24
    for snapshot in snapshots:
        hour = snapshot.timestamp.hour
        totals[hour] += snapshot.total_players
        counts[hour] += 1
    averages = [total / count if count else 0.0 for total, count in zip(totals, counts)]
    peak_average = max(averages)
    peak_hour = averages.index(peak_average)

    recent = _mean_total(snapshots[-TREND_WINDOW:])
    older = _mean_total(snapshots[-2 * TREND_WINDOW : -TREND_WINDOW])
    trend: Trend
    if recent > older * 1.1:
        trend = "increasing"
    elif recent < older * 0.9:
        trend = "decreasing"
    else:
        trend = "stable"

    return PredictiveData(
        expected_peak_hour=peak_hour,
        expected_player_count=math.floor(peak_average + 0.5),
        confidence=min(95.0, len(snapshots) / 100 * 100),
        trend=trend,
    )
