"""Rule-based fan segmentation.

Assigns every fan to exactly one of five segments by walking an ordered list
of segment definitions and taking the first whose rule matches.  The bands
overlap on purpose (e.g. three engagements plus a purchase is not
``engaged_no_purchase``), so rules are never evaluated independently.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterable
from typing import Any, Optional

from pydantic import BaseModel, Field

from fanpulse.common.metrics import segment_members
from fanpulse.storage.models.fan import FanSegmentRow, SegmentName
from fanpulse.storage.models.results import SegmentGroup

logger = logging.getLogger(__name__)

# ── Operator map ──────────────────────────────────────────────────────
_OPS: dict[str, Any] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


class SegmentRule(BaseModel):
    """A single predicate that can be chained with ``and_condition``."""

    field: str
    operator: str
    value: Any
    and_condition: Optional[SegmentRule] = Field(default=None, alias="and")

    model_config = {"populate_by_name": True}


class SegmentDefinition(BaseModel):
    """A named segment; ``rule=None`` matches every fan."""

    name: SegmentName
    description: str
    rule: Optional[SegmentRule] = None


# Priority order matters: first match wins.
_BUILTIN_SEGMENTS: list[dict[str, Any]] = [
    {
        "name": SegmentName.SUPERFANS,
        "description": "Highly engaged fans who also make purchases, your most valuable supporters",
        "rule": {
            "field": "engagement_count",
            "operator": ">=",
            "value": 4,
            "and": {"field": "purchase_count", "operator": ">", "value": 0},
        },
    },
    {
        "name": SegmentName.ENGAGED_NO_PURCHASE,
        "description": "Fans with strong engagement (3+ interactions) but no purchases, prime conversion targets",
        "rule": {
            "field": "engagement_count",
            "operator": ">=",
            "value": 3,
            "and": {"field": "purchase_count", "operator": "==", "value": 0},
        },
    },
    {
        "name": SegmentName.BUYERS_LOW_ENGAGEMENT,
        "description": "Fans who have made purchases but show low engagement, re-engagement opportunity",
        "rule": {
            "field": "purchase_count",
            "operator": ">",
            "value": 0,
            "and": {"field": "engagement_count", "operator": "<", "value": 3},
        },
    },
    {
        "name": SegmentName.CASUAL_FANS,
        "description": "Fans with some engagement but no purchases, need nurturing",
        "rule": {
            "field": "engagement_count",
            "operator": ">=",
            "value": 1,
            "and": {"field": "engagement_count", "operator": "<", "value": 3},
        },
    },
    {
        "name": SegmentName.DORMANT_FANS,
        "description": "Fans with no or very little engagement, at risk of churn",
        "rule": None,
    },
]


class SegmentClassifier:
    """Evaluates ``FanSegmentRow`` aggregates against the ordered segment rules."""

    def __init__(self) -> None:
        self._segments = [SegmentDefinition.model_validate(item) for item in _BUILTIN_SEGMENTS]
        logger.debug("Loaded %d segment definitions", len(self._segments))

    # ── evaluation ────────────────────────────────────────────────────

    def _evaluate_rule(self, row: FanSegmentRow, rule: SegmentRule) -> bool:
        """Recursively evaluate a rule (with optional AND chain)."""
        actual = getattr(row, rule.field, None)
        if actual is None:
            return False
        op_fn = _OPS.get(rule.operator)
        if op_fn is None:
            logger.warning("Unknown operator %s in segment rule", rule.operator)
            return False
        if not op_fn(actual, rule.value):
            return False
        if rule.and_condition is not None:
            return self._evaluate_rule(row, rule.and_condition)
        return True

    def classify(self, row: FanSegmentRow) -> SegmentName:
        """Return the first segment whose rule matches *row*."""
        for defn in self._segments:
            if defn.rule is None or self._evaluate_rule(row, defn.rule):
                return defn.name
        return SegmentName.DORMANT_FANS

    def group(self, rows: Iterable[FanSegmentRow]) -> list[SegmentGroup]:
        """Partition *rows* into one group per segment, in priority order.

        Members keep their input order.  Every segment appears, even when
        empty.
        """
        members: dict[SegmentName, list[FanSegmentRow]] = {
            defn.name: [] for defn in self._segments
        }
        for row in rows:
            members[self.classify(row)].append(row)

        groups: list[SegmentGroup] = []
        for defn in self._segments:
            fans = members[defn.name]
            segment_members.labels(segment=defn.name.value).set(len(fans))
            groups.append(
                SegmentGroup(
                    segment=defn.name,
                    description=defn.description,
                    count=len(fans),
                    fans=fans,
                )
            )
        return groups
