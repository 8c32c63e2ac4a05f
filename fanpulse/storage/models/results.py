"""Per-operation result types returned by the FanPulse service layer."""

from __future__ import annotations

import datetime

from pydantic import Field

from fanpulse.storage.models.fan import (
    EngagementLevel,
    EngagementSummary,
    Fan,
    FanSegmentRow,
    MerchandiseItem,
    RankedFanEngagement,
    SegmentName,
    WireModel,
)


class RecentEngagement(WireModel):
    type: str
    date: str
    details: str | None = None


class PurchaseRecord(WireModel):
    date: str
    product: str
    category: str
    quantity: int
    total_price: float


class FanProfile(Fan):
    """Fan attributes plus recent activity and the windowed summary."""

    recent_engagements: list[RecentEngagement] = Field(default_factory=list)
    purchase_history: list[PurchaseRecord] = Field(default_factory=list)
    engagement_summary: EngagementSummary = Field(default_factory=EngagementSummary)


class LoggedEvent(WireModel):
    success: bool = True
    event_id: str
    fan_id: str
    event_type: str
    event_date: str
    details: str | None = None


class FanEngagementMetrics(WireModel):
    fan_id: str
    lookback_days: int
    metrics: EngagementSummary


class EngagementRanking(WireModel):
    lookback_days: int
    fans: list[RankedFanEngagement]


class MerchandiseSearchResult(WireModel):
    result_count: int
    products: list[MerchandiseItem]


class Recommendation(WireModel):
    product: MerchandiseItem
    relevance_score: int
    reason: str


class RecommendationResult(WireModel):
    fan_id: str
    favorite_team: str | None = None
    favorite_players: str | None = None
    engagement_level: EngagementLevel
    recommendations: list[Recommendation]


class CreatedPromotion(WireModel):
    success: bool = True
    promotion_id: str
    name: str
    description: str
    discount_percent: float
    target_segment: str
    product_category: str
    start_date: datetime.date
    end_date: datetime.date
    estimated_reach: int


class SegmentGroup(WireModel):
    segment: SegmentName
    description: str
    count: int
    fans: list[FanSegmentRow]


class SegmentReport(WireModel):
    team_filter: str
    segments: list[SegmentGroup]
