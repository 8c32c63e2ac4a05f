"""Heuristic merchandise recommendations.

Each in-stock item the fan has not already bought earns points from four
independent rules; reasons accumulate in rule order.  Items that earn
nothing are dropped.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from fanpulse.storage.models.fan import Fan, MerchandiseItem
from fanpulse.storage.models.results import Recommendation

TEAM_MATCH_POINTS: int = 10
PLAYER_MATCH_POINTS: int = 15
PREMIUM_POINTS: int = 5
ENTRY_LEVEL_POINTS: int = 5

PREMIUM_MIN_GAMES: int = 3
PREMIUM_MIN_PRICE: float = 50.0
ENTRY_LEVEL_MAX_EVENTS: int = 3
ENTRY_LEVEL_MAX_PRICE: float = 30.0

DEFAULT_MAX_RESULTS: int = 5


@dataclass
class ScoredItem:
    item: MerchandiseItem
    score: int = 0
    reasons: list[str] = field(default_factory=list)

    def add(self, points: int, reason: str) -> None:
        self.score += points
        self.reasons.append(reason)

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


class RecommendationScorer:
    """Scores catalog items against a fan's profile and all-time engagement."""

    def score_item(
        self,
        fan: Fan,
        item: MerchandiseItem,
        games_attended: int,
        total_events: int,
    ) -> ScoredItem:
        scored = ScoredItem(item=item)

        favorite_team = (fan.favorite_team or "").casefold()
        if favorite_team and (item.team or "").casefold() == favorite_team:
            scored.add(TEAM_MATCH_POINTS, "Matches favorite team")

        favorite_players = (fan.favorite_players or "").casefold()
        if item.player and item.player.casefold() in favorite_players:
            scored.add(PLAYER_MATCH_POINTS, f"Features favorite player: {item.player}")

        if games_attended >= PREMIUM_MIN_GAMES and item.price > PREMIUM_MIN_PRICE:
            scored.add(PREMIUM_POINTS, "Premium pick for dedicated fan")

        if total_events < ENTRY_LEVEL_MAX_EVENTS and item.price < ENTRY_LEVEL_MAX_PRICE:
            scored.add(ENTRY_LEVEL_POINTS, "Great entry-level item")

        return scored

    def recommend(
        self,
        fan: Fan,
        catalog: Iterable[MerchandiseItem],
        purchased_ids: Collection[str],
        games_attended: int,
        total_events: int,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[Recommendation]:
        """Rank unpurchased in-stock items by score, then product ID.

        Out-of-stock items and anything already purchased are excluded
        before scoring.
        """
        candidates: list[ScoredItem] = []
        for item in catalog:
            if not item.in_stock or item.product_id in purchased_ids:
                continue
            scored = self.score_item(fan, item, games_attended, total_events)
            if scored.score > 0:
                candidates.append(scored)

        candidates.sort(key=lambda s: (-s.score, s.item.product_id))
        return [
            Recommendation(product=s.item, relevance_score=s.score, reason=s.reason)
            for s in candidates[: max(max_results, 0)]
        ]
