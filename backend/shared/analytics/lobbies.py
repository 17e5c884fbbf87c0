"""Lobby popularity, durations, hosts and game-mode rankings."""

from __future__ import annotations

import re
from collections.abc import Mapping

from shared.models import GameModeStats, LobbyAnalytics
from shared.models.stats import LobbyDurationStats, LobbySummary, NameCount

# "Bob's Race" -> host "Bob"
HOST_PATTERN = re.compile(r"^([^']+)'s")


def _by_count_desc(counts: Mapping[str, int], limit: int) -> list[NameCount]:
    # sorted() is stable: equal counts keep first-seen order
    items = sorted(counts.items(), key=lambda item: -item[1])
    return [NameCount(name=name, count=count) for name, count in items[:limit]]


def popular_lobbies(lobbies: Mapping[str, LobbyAnalytics], limit: int = 10) -> list[LobbyAnalytics]:
    return sorted(lobbies.values(), key=lambda lobby: -lobby.appearances)[:limit]


def lobby_duration_stats(lobbies: Mapping[str, LobbyAnalytics]) -> LobbyDurationStats:
    values = list(lobbies.values())
    if not values:
        return LobbyDurationStats()

    longest = values[0]
    for lobby in values[1:]:
        if lobby.average_duration > longest.average_duration:
            longest = lobby
    return LobbyDurationStats(
        average_duration=sum(l.average_duration for l in values) / len(values),
        longest_game=longest.game,
        longest_lobby=longest.lobby_name,
        longest_duration=longest.average_duration,
    )


def lobby_host(lobby_name: str) -> str | None:
    match = HOST_PATTERN.match(lobby_name)
    return match.group(1) if match else None


def lobby_summary(lobbies: Mapping[str, LobbyAnalytics], limit: int = 5) -> LobbySummary:
    values = list(lobbies.values())
    if not values:
        return LobbySummary()

    hosts: dict[str, int] = {}
    appearances: dict[str, int] = {}
    for lobby in values:
        # Keyed by name only, so a name shared across games keeps the last count
        appearances[lobby.lobby_name] = lobby.appearances
        host = lobby_host(lobby.lobby_name)
        if host is not None:
            hosts[host] = hosts.get(host, 0) + 1

    return LobbySummary(
        total_lobbies=len(values),
        average_duration=sum(l.average_duration for l in values) / len(values),
        top_hosts=_by_count_desc(hosts, limit),
        popular_lobbies=_by_count_desc(appearances, limit),
    )


def top_game_modes(
    game_modes: Mapping[str, GameModeStats], game: str | None = None, limit: int = 10
) -> list[GameModeStats]:
    modes = [m for m in game_modes.values() if game is None or m.game == game]
    return sorted(modes, key=lambda m: (-m.count, m.game, m.mode))[:limit]
