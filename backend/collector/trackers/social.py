"""Co-occurrence counts between players listed in the same game."""

from __future__ import annotations

from itertools import permutations

from shared.models import Snapshot, SocialStats


def most_frequent(co_players: dict[str, int]) -> str:
    """Highest count wins; on a tie the partner counted first keeps the spot."""
    best, best_count = "", 0
    for partner, count in co_players.items():
        if count > best_count:
            best, best_count = partner, count
    return best


class SocialTracker:
    """Counts any two players listed in the same game as having played together.

    Lobbies are ignored: being online in the same game is the signal.
    """

    def __init__(self, social: dict[str, SocialStats] | None = None) -> None:
        self.social: dict[str, SocialStats] = social if social is not None else {}

    def update(self, snapshot: Snapshot) -> None:
        touched: set[str] = set()
        for _, players in snapshot.players_by_game():
            if len(players) < 2:
                continue
            for player, partner in permutations(players, 2):
                stats = self.social.setdefault(player, SocialStats())
                stats.co_players[partner] = stats.co_players.get(partner, 0) + 1
                touched.add(player)

        for player in touched:
            stats = self.social[player]
            stats.most_frequent_partner = most_frequent(stats.co_players)
