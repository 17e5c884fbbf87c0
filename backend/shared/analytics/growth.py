"""Daily activity, week-over-week growth and trend classification."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from shared.models import Snapshot
from shared.models.stats import GrowthTrends, Trend, WeekOverWeek

from .common import date_key, resolve_now, since

# Percent change beyond which growth counts as a trend
TREND_THRESHOLD = 5.0


def classify_growth(percent_change: float) -> Trend:
    if percent_change > TREND_THRESHOLD:
        return "increasing"
    if percent_change < -TREND_THRESHOLD:
        return "decreasing"
    return "stable"


def daily_unique_players(
    snapshots: Iterable[Snapshot], days: int = 30, now: datetime | None = None
) -> dict[str, int]:
    """Distinct players seen per calendar day within the window."""
    cutoff = resolve_now(now) - timedelta(days=days)
    per_day: dict[str, set[str]] = {}
    for snapshot in since(snapshots, cutoff):
        per_day.setdefault(date_key(snapshot.timestamp), set()).update(snapshot.all_players())
    return {day: len(players) for day, players in sorted(per_day.items())}


def daily_activity(snapshots: Iterable[Snapshot], days: int = 7, now: datetime | None = None) -> dict[str, int]:
    """Sum of per-snapshot totals per calendar day within the window."""
    cutoff = resolve_now(now) - timedelta(days=days)
    totals: dict[str, int] = {}
    for snapshot in since(snapshots, cutoff):
        day = date_key(snapshot.timestamp)
        totals[day] = totals.get(day, 0) + snapshot.total_players
    return dict(sorted(totals.items()))


def week_over_week(snapshots: Iterable[Snapshot], now: datetime | None = None) -> WeekOverWeek:
    now = resolve_now(now)
    one_week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    this_week = last_week = 0
    for snapshot in snapshots:
        if snapshot.timestamp >= one_week_ago:
            this_week += snapshot.total_players
        elif snapshot.timestamp >= two_weeks_ago:
            last_week += snapshot.total_players

    growth = this_week - last_week
    percent_change = growth / last_week * 100 if last_week > 0 else 0.0
    return WeekOverWeek(growth=growth, percent_change=percent_change)


def growth_trends(snapshots: Iterable[Snapshot], days: int = 30, now: datetime | None = None) -> GrowthTrends:
    snapshots = list(snapshots)
    now = resolve_now(now)
    percent_change = week_over_week(snapshots, now).percent_change
    return GrowthTrends(
        daily_players=daily_unique_players(snapshots, days, now),
        week_over_week_growth=percent_change,
        trend=classify_growth(percent_change),
    )


def monthly_active_players(snapshots: Iterable[Snapshot], now: datetime | None = None) -> int:
    cutoff = resolve_now(now) - timedelta(days=30)
    active: set[str] = set()
    for snapshot in since(snapshots, cutoff):
        active.update(snapshot.all_players())
    return len(active)
