"""Unit tests for promotion reach estimation."""

import sqlite3
from unittest.mock import MagicMock

import pytest

from fanpulse.processing.reach_estimator import estimate_reach, segment_label


class TestEstimateReachOnDemoData:
    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ("all", 12),
            ("high_engagement", 6),
            ("low_engagement", 5),
            ("no_purchases", 8),
            ("specific_team", 12),
            ("vip_whales", 12),
        ],
    )
    def test_counts(self, store, target: str, expected: int) -> None:
        assert estimate_reach(store, target) == expected


class TestEstimateReachFailures:
    def test_query_failure_yields_zero(self) -> None:
        store = MagicMock()
        store.count_fans_without_purchases.side_effect = sqlite3.OperationalError("no such table")

        assert estimate_reach(store, "no_purchases") == 0

    def test_non_database_errors_propagate(self) -> None:
        store = MagicMock()
        store.count_fans.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            estimate_reach(store, "all")


def test_segment_label_collapses_free_form_keywords() -> None:
    assert segment_label("high_engagement") == "high_engagement"
    assert segment_label("vip_whales") == "other"
