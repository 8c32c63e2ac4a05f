"""Best-effort reach estimation for promotions.

Counts the fans a target-segment keyword would reach, using all-time
engagement totals.  Unrecognised keywords (including ``specific_team``) fall
back to the total fan count; no team filtering is applied.  A failed query
yields zero so promotion creation never aborts because of it.
"""

from __future__ import annotations

import sqlite3
from typing import Protocol

import structlog

from fanpulse.common.metrics import reach_estimation_failures_total

logger = structlog.get_logger(__name__)

HIGH_ENGAGEMENT = "high_engagement"
LOW_ENGAGEMENT = "low_engagement"
NO_PURCHASES = "no_purchases"

HIGH_ENGAGEMENT_MIN_EVENTS = 4
LOW_ENGAGEMENT_BELOW_EVENTS = 3


class ReachSource(Protocol):
    def count_fans(self) -> int: ...

    def count_fans_with_event_total(
        self, min_events: int | None = None, below_events: int | None = None
    ) -> int: ...

    def count_fans_without_purchases(self) -> int: ...


def _count(store: ReachSource, target_segment: str) -> int:
    if target_segment == HIGH_ENGAGEMENT:
        return store.count_fans_with_event_total(min_events=HIGH_ENGAGEMENT_MIN_EVENTS)
    if target_segment == LOW_ENGAGEMENT:
        return store.count_fans_with_event_total(below_events=LOW_ENGAGEMENT_BELOW_EVENTS)
    if target_segment == NO_PURCHASES:
        return store.count_fans_without_purchases()
    return store.count_fans()


def estimate_reach(store: ReachSource, target_segment: str) -> int:
    """Return the number of fans matching *target_segment*, or 0 on query failure."""
    try:
        return _count(store, target_segment)
    except sqlite3.Error as exc:
        reach_estimation_failures_total.labels(target_segment=segment_label(target_segment)).inc()
        logger.warning("reach_estimation_failed", target_segment=target_segment, error=str(exc))
        return 0


def segment_label(target_segment: str) -> str:
    """Metric label for a keyword; free-form keywords collapse to ``other``."""
    if target_segment in (HIGH_ENGAGEMENT, LOW_ENGAGEMENT, NO_PURCHASES, "all", "specific_team"):
        return target_segment
    return "other"
