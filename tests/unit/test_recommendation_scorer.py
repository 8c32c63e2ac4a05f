"""Unit tests for heuristic merchandise recommendations."""

import pytest

from fanpulse.processing.recommendation_scorer import RecommendationScorer
from fanpulse.storage.models.fan import Fan, MerchandiseItem


@pytest.fixture
def fan() -> Fan:
    return Fan(
        fan_id="fan-001",
        first_name="Maria",
        last_name="Rodriguez",
        email="maria.r@email.com",
        favorite_team="Thunderbolts",
        favorite_players="Jake Storm, Anika Patel",
        join_date="2023-03-15",
    )


def _item(product_id: str, team: str, price: float, player: str = "", in_stock: bool = True) -> MerchandiseItem:
    return MerchandiseItem(
        product_id=product_id,
        name=f"Item {product_id}",
        category="Jersey",
        team=team,
        player=player,
        price=price,
        in_stock=in_stock,
    )


@pytest.fixture
def scorer() -> RecommendationScorer:
    return RecommendationScorer()


class TestScoreItem:
    def test_team_player_and_premium_rules_accumulate(self, scorer: RecommendationScorer, fan: Fan) -> None:
        item = _item("prod-004", "Thunderbolts", 109.99, player="Anika Patel")

        scored = scorer.score_item(fan, item, games_attended=3, total_events=5)

        assert scored.score == 30
        assert scored.reason == (
            "Matches favorite team; Features favorite player: Anika Patel; "
            "Premium pick for dedicated fan"
        )

    def test_jake_storm_jersey_for_four_game_fan(self, scorer: RecommendationScorer, fan: Fan) -> None:
        item = _item("prod-003", "Thunderbolts", 109.99, player="Jake Storm")

        scored = scorer.score_item(fan, item, games_attended=4, total_events=4)

        assert scored.score == 30
        assert scored.reason == (
            "Matches favorite team; Features favorite player: Jake Storm; "
            "Premium pick for dedicated fan"
        )

    def test_entry_level_item_for_new_fan(self, scorer: RecommendationScorer, fan: Fan) -> None:
        item = _item("prod-017", "Thunderbolts", 14.99)

        scored = scorer.score_item(fan, item, games_attended=0, total_events=1)

        assert scored.score == 15
        assert scored.reason == "Matches favorite team; Great entry-level item"

    def test_team_match_ignores_case(self, scorer: RecommendationScorer, fan: Fan) -> None:
        scored = scorer.score_item(fan, _item("p", "THUNDERBOLTS", 40.0), 0, 10)
        assert scored.score == 10

    def test_missing_favorite_team_never_matches(self, scorer: RecommendationScorer, fan: Fan) -> None:
        no_team = fan.model_copy(update={"favorite_team": None})
        scored = scorer.score_item(no_team, _item("p", "", 40.0), 0, 10)
        assert scored.score == 0


class TestRecommend:
    def test_excludes_purchased_out_of_stock_and_zero_score(
        self, scorer: RecommendationScorer, fan: Fan
    ) -> None:
        catalog = [
            _item("prod-003", "Thunderbolts", 109.99, player="Jake Storm"),
            _item("prod-024", "Thunderbolts", 49.99, player="Jake Storm", in_stock=False),
            _item("prod-014", "Summit FC", 26.99),
            _item("prod-012", "Thunderbolts", 24.99),
        ]

        recs = scorer.recommend(fan, catalog, {"prod-003"}, games_attended=3, total_events=5)

        assert [r.product.product_id for r in recs] == ["prod-012"]

    def test_ties_break_on_product_id(self, scorer: RecommendationScorer, fan: Fan) -> None:
        catalog = [
            _item("prod-020", "Thunderbolts", 64.99),
            _item("prod-001", "Thunderbolts", 89.99),
            _item("prod-004", "Thunderbolts", 109.99, player="Anika Patel"),
        ]

        recs = scorer.recommend(fan, catalog, set(), games_attended=3, total_events=5)

        assert [r.product.product_id for r in recs] == ["prod-004", "prod-001", "prod-020"]
        assert [r.relevance_score for r in recs] == [30, 15, 15]

    def test_respects_max_results(self, scorer: RecommendationScorer, fan: Fan) -> None:
        catalog = [_item(f"prod-{i:03d}", "Thunderbolts", 20.0) for i in range(10)]

        assert len(scorer.recommend(fan, catalog, set(), 0, 0, max_results=3)) == 3
        assert scorer.recommend(fan, catalog, set(), 0, 0, max_results=0) == []
