"""Engagement aggregation for FanPulse.

Reduces raw engagement events and purchases into the counters the segment
classifier and recommendation scorer consume.  Everything here is a pure
function of its inputs; the caller fetches rows from the store and supplies
"today" so results are reproducible.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from fanpulse.storage.models.fan import (
    APP_OPEN,
    CONTENT_VIEW,
    GAME_ATTENDANCE,
    NEVER_ENGAGED,
    NO_ACTIVITY,
    SOCIAL_SHARE,
    EngagementEvent,
    EngagementLevel,
    EngagementSummary,
    Fan,
    FanSegmentRow,
    Purchase,
    RankedFanEngagement,
)

# Engagement-level thresholds (games attended)
SUPERFAN_MIN_GAMES: int = 4
REGULAR_MIN_GAMES: int = 2


def lookback_cutoff(today: date, lookback_days: int) -> date:
    """First date (inclusive) that falls inside the lookback window.

    Windows reaching past the earliest representable date clamp to it, so a
    very large lookback means "all time".
    """
    if lookback_days >= (today - date.min).days:
        return date.min
    return today - timedelta(days=lookback_days)


def windowed_engagement_level(games_attended: int, total_events: int) -> EngagementLevel:
    """Four-way level for windowed summaries; zero events is always dormant."""
    if games_attended >= SUPERFAN_MIN_GAMES:
        return EngagementLevel.SUPERFAN
    if games_attended >= REGULAR_MIN_GAMES:
        return EngagementLevel.REGULAR
    if total_events > 0:
        return EngagementLevel.CASUAL
    return EngagementLevel.DORMANT


def all_time_engagement_level(games_attended: int) -> EngagementLevel:
    """Three-way level used by recommendations; there is no dormant branch."""
    if games_attended >= SUPERFAN_MIN_GAMES:
        return EngagementLevel.SUPERFAN
    if games_attended >= REGULAR_MIN_GAMES:
        return EngagementLevel.REGULAR
    return EngagementLevel.CASUAL


def engagement_score(total_events: int, distinct_kinds: int, games_attended: int) -> int:
    return total_events * distinct_kinds + games_attended * 2


def summarize_events(
    events: Iterable[EngagementEvent], since: date | None = None
) -> EngagementSummary:
    """Count events on or after *since*.

    Unrecognised event kinds contribute to ``total_events`` and
    ``distinct_event_kinds`` but to no per-kind bucket.
    """
    cutoff = since.isoformat() if since is not None else None
    kinds: dict[str, int] = defaultdict(int)
    dates: list[str] = []
    for event in events:
        if cutoff is not None and event.event_date < cutoff:
            continue
        kinds[event.event_type] += 1
        dates.append(event.event_date)

    total = len(dates)
    games = kinds.get(GAME_ATTENDANCE, 0)
    return EngagementSummary(
        total_events=total,
        distinct_event_kinds=len(kinds),
        games_attended=games,
        app_opens=kinds.get(APP_OPEN, 0),
        social_shares=kinds.get(SOCIAL_SHARE, 0),
        content_views=kinds.get(CONTENT_VIEW, 0),
        first_event=min(dates) if dates else NO_ACTIVITY,
        last_event=max(dates) if dates else NO_ACTIVITY,
        engagement_level=windowed_engagement_level(games, total),
    )


def _events_by_fan(events: Iterable[EngagementEvent]) -> dict[str, list[EngagementEvent]]:
    grouped: dict[str, list[EngagementEvent]] = defaultdict(list)
    for event in events:
        grouped[event.fan_id].append(event)
    return grouped


def rank_fans(
    fans: Sequence[Fan],
    events: Iterable[EngagementEvent],
    since: date | None = None,
) -> list[RankedFanEngagement]:
    """Rank every fan by engagement score, descending; ties by fan ID ascending."""
    grouped = _events_by_fan(events)
    ranked: list[RankedFanEngagement] = []
    for fan in fans:
        summary = summarize_events(grouped.get(fan.fan_id, ()), since)
        ranked.append(
            RankedFanEngagement(
                fan_id=fan.fan_id,
                name=fan.name,
                favorite_team=fan.favorite_team,
                total_events=summary.total_events,
                event_types=summary.distinct_event_kinds,
                games_attended=summary.games_attended,
                last_engagement=summary.last_event,
                engagement_score=engagement_score(
                    summary.total_events,
                    summary.distinct_event_kinds,
                    summary.games_attended,
                ),
                engagement_level=summary.engagement_level,
            )
        )
    ranked.sort(key=lambda row: (-row.engagement_score, row.fan_id))
    return ranked


def build_segment_rows(
    fans: Sequence[Fan],
    events: Iterable[EngagementEvent],
    purchases: Iterable[Purchase],
) -> list[FanSegmentRow]:
    """All-time per-fan aggregates, one row per fan, in input order.

    Event and purchase counts are computed independently so neither inflates
    the other.
    """
    grouped_events = _events_by_fan(events)
    purchase_count: dict[str, int] = defaultdict(int)
    spent: dict[str, float] = defaultdict(float)
    for purchase in purchases:
        purchase_count[purchase.fan_id] += 1
        spent[purchase.fan_id] += purchase.total_price

    rows: list[FanSegmentRow] = []
    for fan in fans:
        fan_events = grouped_events.get(fan.fan_id, [])
        dates = [e.event_date for e in fan_events]
        rows.append(
            FanSegmentRow(
                fan_id=fan.fan_id,
                name=fan.name,
                email=fan.email,
                favorite_team=fan.favorite_team,
                engagement_count=len(fan_events),
                games_attended=sum(1 for e in fan_events if e.event_type == GAME_ATTENDANCE),
                purchase_count=purchase_count.get(fan.fan_id, 0),
                total_spent=round(spent.get(fan.fan_id, 0.0), 2),
                last_engagement=max(dates) if dates else NEVER_ENGAGED,
            )
        )
    return rows
