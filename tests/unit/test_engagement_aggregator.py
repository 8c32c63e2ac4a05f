"""Unit tests for engagement aggregation and ranking."""

from datetime import date

import pytest

from fanpulse.processing.engagement_aggregator import (
    all_time_engagement_level,
    build_segment_rows,
    lookback_cutoff,
    rank_fans,
    summarize_events,
    windowed_engagement_level,
)
from fanpulse.storage.models.fan import EngagementEvent, EngagementLevel, Fan, Purchase


def _event(event_id: str, fan_id: str, event_type: str, event_date: str) -> EngagementEvent:
    return EngagementEvent(event_id=event_id, fan_id=fan_id, event_type=event_type, event_date=event_date)


def _fan(fan_id: str) -> Fan:
    return Fan(
        fan_id=fan_id,
        first_name="Fan",
        last_name=fan_id,
        email=f"{fan_id}@example.com",
        favorite_team="River Wolves",
        join_date="2024-01-01",
    )


class TestEngagementLevels:
    def test_windowed_scale(self) -> None:
        assert windowed_engagement_level(4, 4) == EngagementLevel.SUPERFAN
        assert windowed_engagement_level(2, 2) == EngagementLevel.REGULAR
        assert windowed_engagement_level(1, 5) == EngagementLevel.CASUAL
        assert windowed_engagement_level(0, 0) == EngagementLevel.DORMANT

    def test_all_time_scale_has_no_dormant(self) -> None:
        assert all_time_engagement_level(5) == EngagementLevel.SUPERFAN
        assert all_time_engagement_level(3) == EngagementLevel.REGULAR
        assert all_time_engagement_level(0) == EngagementLevel.CASUAL


class TestSummarizeEvents:
    def test_window_is_inclusive_of_cutoff(self) -> None:
        since = lookback_cutoff(date(2026, 1, 15), 30)
        events = [
            _event("e1", "fan-1", "game_attendance", "2025-12-15"),
            _event("e2", "fan-1", "game_attendance", "2025-12-16"),
            _event("e3", "fan-1", "app_open", "2026-01-10"),
        ]

        summary = summarize_events(events, since)

        assert since == date(2025, 12, 16)
        assert summary.total_events == 2
        assert summary.games_attended == 1
        assert summary.first_event == "2025-12-16"
        assert summary.last_event == "2026-01-10"

    def test_huge_lookback_clamps_to_earliest_date(self) -> None:
        assert lookback_cutoff(date(2026, 1, 15), 1_000_000) == date.min
        assert lookback_cutoff(date(2026, 1, 15), (date(2026, 1, 15) - date.min).days) == date.min

    def test_unknown_kind_counts_toward_totals_only(self) -> None:
        events = [
            _event("e1", "fan-1", "podcast_listen", "2025-12-01"),
            _event("e2", "fan-1", "app_open", "2025-12-02"),
        ]

        summary = summarize_events(events)

        assert summary.total_events == 2
        assert summary.distinct_event_kinds == 2
        assert summary.app_opens == 1
        assert summary.games_attended + summary.social_shares + summary.content_views == 0
        assert summary.engagement_level == EngagementLevel.CASUAL

    def test_no_events_is_dormant(self) -> None:
        summary = summarize_events([])
        assert summary.engagement_level == EngagementLevel.DORMANT
        assert summary.first_event == "none"
        assert summary.last_event == "none"


class TestRankFans:
    def test_sorted_by_score_then_fan_id(self) -> None:
        fans = [_fan("fan-003"), _fan("fan-001"), _fan("fan-002")]
        events = [
            _event("e1", "fan-003", "app_open", "2025-12-01"),
            _event("e2", "fan-001", "app_open", "2025-12-01"),
            _event("e3", "fan-002", "game_attendance", "2025-12-01"),
        ]

        ranked = rank_fans(fans, events)

        assert [r.fan_id for r in ranked] == ["fan-002", "fan-001", "fan-003"]
        assert [r.engagement_score for r in ranked] == [3, 1, 1]

    def test_fans_without_events_are_included(self) -> None:
        ranked = rank_fans([_fan("fan-001")], [])
        assert ranked[0].engagement_score == 0
        assert ranked[0].last_engagement == "none"
        assert ranked[0].engagement_level == EngagementLevel.DORMANT


class TestBuildSegmentRows:
    def test_counts_are_independent(self) -> None:
        events = [_event(f"e{i}", "fan-001", "game_attendance", f"2025-12-0{i}") for i in range(1, 4)]
        purchases = [
            Purchase(purchase_id="p1", fan_id="fan-001", product_id="x", purchase_date="2025-12-01", total_price=10.10),
            Purchase(purchase_id="p2", fan_id="fan-001", product_id="y", purchase_date="2025-12-02", total_price=5.25),
        ]

        rows = build_segment_rows([_fan("fan-001"), _fan("fan-002")], events, purchases)

        assert rows[0].engagement_count == 3
        assert rows[0].games_attended == 3
        assert rows[0].purchase_count == 2
        assert rows[0].total_spent == pytest.approx(15.35)
        assert rows[0].last_engagement == "2025-12-03"
        assert rows[1].engagement_count == 0
        assert rows[1].last_engagement == "never"
