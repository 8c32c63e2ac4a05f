"""Fan, engagement, merchandise, and purchase models for FanPulse.

Defines Pydantic v2 models that serve as the canonical schema between the
SQLite store, the aggregation and scoring logic, and the MCP/REST surfaces.
Wire names are camelCase (``fanId``, ``favoriteTeam``) so serialised output
keeps the field names dashboards and chat clients already consume.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SegmentName(StrEnum):
    """Mutually exclusive behavioural buckets, in classification priority order."""

    SUPERFANS = "superfans"
    ENGAGED_NO_PURCHASE = "engaged_no_purchase"
    BUYERS_LOW_ENGAGEMENT = "buyers_low_engagement"
    CASUAL_FANS = "casual_fans"
    DORMANT_FANS = "dormant_fans"


class EngagementLevel(StrEnum):
    """Coarse engagement tag attached to summaries and recommendations."""

    SUPERFAN = "superfan"
    REGULAR = "regular"
    CASUAL = "casual"
    DORMANT = "dormant"


# Event kinds and categories are open vocabularies: these are the known
# values, but unrecognised strings are stored and counted toward totals.
GAME_ATTENDANCE: Final[str] = "game_attendance"
APP_OPEN: Final[str] = "app_open"
SOCIAL_SHARE: Final[str] = "social_share"
CONTENT_VIEW: Final[str] = "content_view"
KNOWN_EVENT_TYPES: Final[tuple[str, ...]] = (
    GAME_ATTENDANCE,
    APP_OPEN,
    SOCIAL_SHARE,
    CONTENT_VIEW,
)

MERCH_CATEGORIES: Final[tuple[str, ...]] = (
    "Jersey",
    "Hat",
    "Accessory",
    "Drinkware",
    "Apparel",
    "Equipment",
    "Collectible",
)

NO_ACTIVITY: Final[str] = "none"
NEVER_ENGAGED: Final[str] = "never"


class WireModel(BaseModel):
    """Base for every model that crosses the MCP/REST boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Stored entities
# ---------------------------------------------------------------------------


class Fan(WireModel):
    """A registered supporter.  Never written by the scoring core."""

    fan_id: str
    first_name: str
    last_name: str
    email: str
    favorite_team: str | None = None
    favorite_players: str | None = None
    join_date: str
    city: str | None = None
    state: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class EngagementEvent(WireModel):
    event_id: str
    fan_id: str
    event_type: str
    event_date: str
    details: str | None = None


class MerchandiseItem(WireModel):
    product_id: str
    name: str
    category: str
    team: str | None = None
    player: str | None = None
    price: float = Field(..., ge=0)
    in_stock: bool = True


class Purchase(WireModel):
    purchase_id: str
    fan_id: str
    product_id: str
    purchase_date: str
    quantity: int = Field(1, gt=0)
    total_price: float


class Promotion(WireModel):
    promotion_id: str
    name: str
    description: str
    discount_percent: float
    target_segment: str
    product_category: str
    start_date: date
    end_date: date
    created_date: date


# ---------------------------------------------------------------------------
# Derived, never persisted
# ---------------------------------------------------------------------------


class EngagementSummary(WireModel):
    """Windowed per-fan engagement counters."""

    total_events: int = 0
    distinct_event_kinds: int = 0
    games_attended: int = 0
    app_opens: int = 0
    social_shares: int = 0
    content_views: int = 0
    first_event: str = NO_ACTIVITY
    last_event: str = NO_ACTIVITY
    engagement_level: EngagementLevel = EngagementLevel.DORMANT


class RankedFanEngagement(WireModel):
    """One row of the all-fan engagement ranking."""

    fan_id: str
    name: str
    favorite_team: str | None = None
    total_events: int
    event_types: int
    games_attended: int
    last_engagement: str = NO_ACTIVITY
    engagement_score: int
    engagement_level: EngagementLevel


class FanSegmentRow(WireModel):
    """All-time aggregate used by the segment classifier."""

    fan_id: str
    name: str
    email: str
    favorite_team: str | None = None
    engagement_count: int = 0
    games_attended: int = 0
    purchase_count: int = 0
    total_spent: float = 0.0
    last_engagement: str = NEVER_ENGAGED
