"""Unit tests for rule-based fan segmentation."""

import pytest

from fanpulse.processing.segment_classifier import SegmentClassifier, SegmentRule
from fanpulse.storage.models.fan import FanSegmentRow, SegmentName


def _row(fan_id: str, engagements: int, purchases: int) -> FanSegmentRow:
    return FanSegmentRow(
        fan_id=fan_id,
        name="Test Fan",
        email=f"{fan_id}@example.com",
        favorite_team="Thunderbolts",
        engagement_count=engagements,
        purchase_count=purchases,
    )


@pytest.fixture
def classifier() -> SegmentClassifier:
    return SegmentClassifier()


class TestClassify:
    """First matching rule wins."""

    @pytest.mark.parametrize(
        ("engagements", "purchases", "expected"),
        [
            (4, 1, SegmentName.SUPERFANS),
            (10, 3, SegmentName.SUPERFANS),
            (3, 0, SegmentName.ENGAGED_NO_PURCHASE),
            (7, 0, SegmentName.ENGAGED_NO_PURCHASE),
            (2, 1, SegmentName.BUYERS_LOW_ENGAGEMENT),
            (0, 2, SegmentName.BUYERS_LOW_ENGAGEMENT),
            (1, 0, SegmentName.CASUAL_FANS),
            (2, 0, SegmentName.CASUAL_FANS),
            (0, 0, SegmentName.DORMANT_FANS),
        ],
    )
    def test_bands(
        self, classifier: SegmentClassifier, engagements: int, purchases: int, expected: SegmentName
    ) -> None:
        assert classifier.classify(_row("fan-x", engagements, purchases)) == expected

    def test_three_engagements_with_purchase_falls_through_to_dormant(
        self, classifier: SegmentClassifier
    ) -> None:
        """Exactly three engagements plus a purchase matches no earlier band."""
        assert classifier.classify(_row("fan-x", 3, 1)) == SegmentName.DORMANT_FANS

    def test_classification_is_idempotent(self, classifier: SegmentClassifier) -> None:
        row = _row("fan-x", 5, 2)
        assert classifier.classify(row) == classifier.classify(row)


class TestGroup:
    def test_every_fan_lands_in_exactly_one_segment(self, classifier: SegmentClassifier) -> None:
        rows = [_row(f"fan-{i:03d}", e, p) for i, (e, p) in enumerate(
            [(0, 0), (1, 0), (2, 1), (3, 0), (3, 1), (4, 0), (4, 1), (9, 9)]
        )]
        groups = classifier.group(rows)

        assert [g.segment for g in groups] == list(SegmentName)
        assert sum(g.count for g in groups) == len(rows)
        members = [fan.fan_id for g in groups for fan in g.fans]
        assert sorted(members) == sorted(r.fan_id for r in rows)

    def test_empty_segments_still_reported(self, classifier: SegmentClassifier) -> None:
        groups = classifier.group([_row("fan-001", 5, 1)])

        counts = {g.segment: g.count for g in groups}
        assert counts[SegmentName.SUPERFANS] == 1
        assert counts[SegmentName.DORMANT_FANS] == 0
        assert all(g.description for g in groups)

    def test_members_keep_input_order(self, classifier: SegmentClassifier) -> None:
        groups = classifier.group([_row("fan-009", 1, 0), _row("fan-002", 2, 0)])
        casual = next(g for g in groups if g.segment == SegmentName.CASUAL_FANS)
        assert [f.fan_id for f in casual.fans] == ["fan-009", "fan-002"]


class TestSegmentRule:
    def test_unknown_operator_never_matches(self, classifier: SegmentClassifier) -> None:
        rule = SegmentRule(field="engagement_count", operator="~=", value=1)
        assert classifier._evaluate_rule(_row("fan-x", 1, 0), rule) is False

    def test_and_chain_parsed_from_alias(self) -> None:
        rule = SegmentRule.model_validate(
            {
                "field": "engagement_count",
                "operator": ">=",
                "value": 4,
                "and": {"field": "purchase_count", "operator": ">", "value": 0},
            }
        )
        assert rule.and_condition is not None
        assert rule.and_condition.field == "purchase_count"
