"""FanPulse operations shared by the MCP tools, REST routes, and CLI.

Each method fetches what it needs from the injected store, hands the rows to
the pure aggregation / classification / scoring functions, and returns a
typed result.  Unknown fans raise ``FanNotFoundError``; the protocol layers
turn that into a structured not-found response.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

import structlog

from fanpulse.common import settings
from fanpulse.common.metrics import (
    engagement_events_logged_total,
    promotions_created_total,
    recommendations_returned,
)
from fanpulse.processing.engagement_aggregator import (
    all_time_engagement_level,
    build_segment_rows,
    lookback_cutoff,
    rank_fans,
    summarize_events,
)
from fanpulse.processing.reach_estimator import estimate_reach, segment_label
from fanpulse.processing.recommendation_scorer import (
    DEFAULT_MAX_RESULTS,
    RecommendationScorer,
)
from fanpulse.processing.segment_classifier import SegmentClassifier
from fanpulse.storage.models.fan import EngagementEvent, Promotion
from fanpulse.storage.models.results import (
    CreatedPromotion,
    EngagementRanking,
    FanEngagementMetrics,
    FanProfile,
    LoggedEvent,
    MerchandiseSearchResult,
    RecommendationResult,
    SegmentReport,
)
from fanpulse.storage.sqlite_fan_store import SQLiteFanStore

logger = structlog.get_logger(__name__)

RECENT_ENGAGEMENT_LIMIT = 10
PROMOTION_DEFAULT_DAYS = 30


class FanNotFoundError(LookupError):
    """Raised when a fan ID or email does not resolve."""

    def __init__(self, identifier: str, field: str = "fanId") -> None:
        super().__init__(f"Fan not found: {identifier}")
        self.identifier = identifier
        self.field = field

    def to_wire(self) -> dict[str, str]:
        return {"error": "Fan not found", self.field: self.identifier}


def _utc_today() -> date:
    return datetime.now(UTC).date()


def _short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:7]}"


class FanPulseService:
    """Application service for the seven FanPulse operations."""

    def __init__(
        self,
        store: SQLiteFanStore,
        today: Callable[[], date] = _utc_today,
        default_lookback_days: int = settings.DEFAULT_LOOKBACK_DAYS,
    ) -> None:
        self._store = store
        self._today = today
        self._default_lookback_days = default_lookback_days
        self._classifier = SegmentClassifier()
        self._scorer = RecommendationScorer()

    # ── fans ──────────────────────────────────────────────────────────

    def get_fan_profile(self, fan_identifier: str) -> FanProfile:
        fan = self._store.find_fan(fan_identifier)
        if fan is None:
            raise FanNotFoundError(fan_identifier, field="identifier")

        since = lookback_cutoff(self._today(), self._default_lookback_days)
        summary = summarize_events(self._store.list_events(fan.fan_id, since=since))
        return FanProfile(
            **fan.model_dump(),
            recent_engagements=self._store.recent_engagements(fan.fan_id, RECENT_ENGAGEMENT_LIMIT),
            purchase_history=self._store.purchase_history(fan.fan_id),
            engagement_summary=summary,
        )

    def log_engagement_event(
        self,
        fan_id: str,
        event_type: str,
        details: str,
        event_date: date | None = None,
    ) -> LoggedEvent:
        """Record an engagement event.  Unknown event kinds are stored as-is."""
        if self._store.get_fan(fan_id) is None:
            raise FanNotFoundError(fan_id)

        event = EngagementEvent(
            event_id=_short_id("evt"),
            fan_id=fan_id,
            event_type=event_type,
            event_date=(event_date or self._today()).isoformat(),
            details=details,
        )
        self._store.insert_event(event)
        engagement_events_logged_total.labels(event_type=event_type).inc()
        logger.info("engagement_event_logged", event_id=event.event_id, event_type=event_type)
        return LoggedEvent(
            event_id=event.event_id,
            fan_id=fan_id,
            event_type=event_type,
            event_date=event.event_date,
            details=details,
        )

    # ── engagement ────────────────────────────────────────────────────

    def get_fan_engagement_metrics(
        self, fan_id: str, lookback_days: int | None = None
    ) -> FanEngagementMetrics:
        days = lookback_days if lookback_days is not None else self._default_lookback_days
        if self._store.get_fan(fan_id) is None:
            raise FanNotFoundError(fan_id)
        since = lookback_cutoff(self._today(), days)
        summary = summarize_events(self._store.list_events(fan_id, since=since))
        return FanEngagementMetrics(fan_id=fan_id, lookback_days=days, metrics=summary)

    def rank_fan_engagement(self, lookback_days: int | None = None) -> EngagementRanking:
        days = lookback_days if lookback_days is not None else self._default_lookback_days
        since = lookback_cutoff(self._today(), days)
        fans = self._store.list_fans()
        ranked = rank_fans(fans, self._store.list_events(since=since))
        return EngagementRanking(lookback_days=days, fans=ranked)

    # ── merchandise ───────────────────────────────────────────────────

    def search_merchandise(
        self,
        team: str | None = None,
        category: str | None = None,
        player: str | None = None,
        max_price: float | None = None,
        in_stock_only: bool = True,
    ) -> MerchandiseSearchResult:
        products = self._store.search_merchandise(
            team=team,
            category=category,
            player=player,
            max_price=max_price,
            in_stock_only=in_stock_only,
        )
        return MerchandiseSearchResult(result_count=len(products), products=products)

    def get_merch_recommendations(
        self, fan_id: str, max_results: int | None = None
    ) -> RecommendationResult:
        fan = self._store.get_fan(fan_id)
        if fan is None:
            raise FanNotFoundError(fan_id)

        limit = max_results if max_results is not None else DEFAULT_MAX_RESULTS
        totals = summarize_events(self._store.list_events(fan_id))
        recommendations = self._scorer.recommend(
            fan,
            self._store.list_merchandise(in_stock_only=True),
            self._store.purchased_product_ids(fan_id),
            games_attended=totals.games_attended,
            total_events=totals.total_events,
            max_results=limit,
        )
        recommendations_returned.observe(len(recommendations))
        return RecommendationResult(
            fan_id=fan_id,
            favorite_team=fan.favorite_team,
            favorite_players=fan.favorite_players,
            engagement_level=all_time_engagement_level(totals.games_attended),
            recommendations=recommendations,
        )

    # ── promotions ────────────────────────────────────────────────────

    def create_promotion(
        self,
        name: str,
        description: str,
        discount_percent: float,
        target_segment: str,
        product_category: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CreatedPromotion:
        today = self._today()
        start = start_date or today
        promotion = Promotion(
            promotion_id=_short_id("promo"),
            name=name,
            description=description,
            discount_percent=discount_percent,
            target_segment=target_segment,
            product_category=product_category,
            start_date=start,
            end_date=end_date or start + timedelta(days=PROMOTION_DEFAULT_DAYS),
            created_date=today,
        )
        self._store.insert_promotion(promotion)
        promotions_created_total.labels(target_segment=segment_label(target_segment)).inc()

        reach = estimate_reach(self._store, target_segment)
        logger.info(
            "promotion_created",
            promotion_id=promotion.promotion_id,
            target_segment=target_segment,
            estimated_reach=reach,
        )
        return CreatedPromotion(
            promotion_id=promotion.promotion_id,
            name=promotion.name,
            description=promotion.description,
            discount_percent=promotion.discount_percent,
            target_segment=promotion.target_segment,
            product_category=promotion.product_category,
            start_date=promotion.start_date,
            end_date=promotion.end_date,
            estimated_reach=reach,
        )

    # ── segments ──────────────────────────────────────────────────────

    def get_fan_segments(self, team: str | None = None) -> SegmentReport:
        """Classify every fan (optionally only those whose favorite team contains *team*)."""
        fans = self._store.list_fans(team=team)
        fan_ids = {fan.fan_id for fan in fans}
        events = [e for e in self._store.list_events() if e.fan_id in fan_ids]
        purchases = [p for p in self._store.list_purchases() if p.fan_id in fan_ids]
        rows = build_segment_rows(fans, events, purchases)
        return SegmentReport(
            team_filter=team if team is not None else "all",
            segments=self._classifier.group(rows),
        )
