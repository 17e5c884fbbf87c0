"""Helpers shared by the analytics queries."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from shared.models import Snapshot

T = TypeVar("T")

DAY = timedelta(days=1)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def resolve_now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def since(snapshots: Iterable[Snapshot], cutoff: datetime) -> list[Snapshot]:
    return [s for s in snapshots if s.timestamp >= cutoff]


def date_key(value: datetime) -> str:
    """Calendar day of ``value`` in its own offset, as YYYY-MM-DD."""
    return value.date().isoformat()


def ranked(items: Iterable[T], value: Callable[[T], int], name: Callable[[T], str], limit: int) -> list[T]:
    """Highest value first, ties by name, truncated to ``limit``."""
    return sorted(items, key=lambda item: (-value(item), name(item)))[: max(limit, 0)]


def argmax(counts: dict[int, int], default: int = 0) -> int:
    """Key of the largest count; the earliest inserted key wins a tie."""
    best_key, best = default, None
    for key, count in counts.items():
        if best is None or count > best:
            best_key, best = key, count
    return best_key
