"""Data model for per-player co-occurrence counts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .base import str_counts


@dataclass
class SocialStats:
    co_players: dict[str, int] = field(default_factory=dict)
    most_frequent_partner: str = ""

    @property
    def unique_partners(self) -> int:
        return len(self.co_players)

    def to_dict(self) -> dict[str, Any]:
        return {
            "co_players": dict(self.co_players),
            "most_frequent_partner": self.most_frequent_partner,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SocialStats:
        return cls(
            co_players=str_counts(data.get("co_players")),
            most_frequent_partner=str(data.get("most_frequent_partner") or ""),
        )
