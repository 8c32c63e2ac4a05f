"""MCP tool surface for FanPulse.

Exposes the seven FanPulse operations as MCP tools for an LLM chat client.
Tools return pretty-printed JSON text with camelCase field names; a fan that
does not resolve yields ``{"error": "Fan not found", ...}`` rather than a
tool error so the model can tell "not found" apart from "nothing matched".
"""

import json
from collections.abc import Callable
from datetime import date
from typing import Annotated, Any

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from fanpulse.common import settings
from fanpulse.common.logging_config import new_correlation_id
from fanpulse.common.metrics import track_tool
from fanpulse.serving.fan_service import FanNotFoundError, FanPulseService
from fanpulse.storage.models.fan import KNOWN_EVENT_TYPES, MERCH_CATEGORIES

logger = structlog.get_logger(__name__)

SERVER_NAME = "FanPulse"

_INSTRUCTIONS = (
    "Fan engagement and merchandise tools for a sports club. Look up fans by ID "
    "(e.g. 'fan-001') or email, log engagement, rank fans, search the catalog, "
    "recommend merchandise, segment the fan base, and create targeted promotions."
)

TOOL_NAMES = (
    "get_fan_profile",
    "log_engagement_event",
    "get_fan_engagement_metrics",
    "search_merchandise",
    "get_merch_recommendations",
    "create_promotion",
    "get_fan_segments",
)


def _respond(tool: str, operation: Callable[[], Any]) -> str:
    """Run *operation* under a fresh correlation ID and serialise its result."""
    new_correlation_id()
    with track_tool(tool) as state:
        try:
            result = operation().to_wire()
        except FanNotFoundError as exc:
            state["outcome"] = "not_found"
            logger.info("fan_not_found", tool=tool, identifier=exc.identifier)
            result = exc.to_wire()
    logger.debug("tool_completed", tool=tool, outcome=state["outcome"])
    return json.dumps(result, indent=2, default=str)


def build_mcp_server(service: FanPulseService) -> FastMCP:
    """Create a FastMCP server whose tools delegate to *service*."""
    mcp = FastMCP(SERVER_NAME, instructions=_INSTRUCTIONS)

    @mcp.tool()
    def get_fan_profile(
        fan_identifier: Annotated[
            str, Field(description="The fan ID (e.g. 'fan-001') or email address to look up")
        ],
    ) -> str:
        """Get a fan's profile including their favorite team, players, attendance history, and purchase history."""
        return _respond("get_fan_profile", lambda: service.get_fan_profile(fan_identifier))

    @mcp.tool()
    def log_engagement_event(
        fan_id: Annotated[str, Field(description="The fan ID (e.g. 'fan-001')")],
        event_type: Annotated[
            str,
            Field(description=f"Type of engagement: {', '.join(KNOWN_EVENT_TYPES)}"),
        ],
        details: Annotated[str, Field(description="Additional details about the event")],
        event_date: Annotated[
            date | None, Field(description="Date of the event in YYYY-MM-DD format (defaults to today)")
        ] = None,
    ) -> str:
        """Record a fan engagement event such as game attendance, app usage, social media interaction, or content viewing."""
        return _respond(
            "log_engagement_event",
            lambda: service.log_engagement_event(fan_id, event_type, details, event_date),
        )

    @mcp.tool()
    def get_fan_engagement_metrics(
        fan_id: Annotated[
            str | None,
            Field(description="Optional fan ID for one fan's metrics. If omitted, returns all fans ranked by engagement."),
        ] = None,
        lookback_days: Annotated[
            int | None,
            Field(
                description=(
                    "Number of days to look back for engagement data "
                    f"(default {settings.DEFAULT_LOOKBACK_DAYS}; e.g. 365 for a full year)."
                )
            ),
        ] = None,
    ) -> str:
        """Get engagement metrics and scores for a specific fan or all fans. Returns engagement frequency, recency, and an overall score."""
        if fan_id is not None:
            return _respond(
                "get_fan_engagement_metrics",
                lambda: service.get_fan_engagement_metrics(fan_id, lookback_days),
            )
        return _respond(
            "get_fan_engagement_metrics",
            lambda: service.rank_fan_engagement(lookback_days),
        )

    @mcp.tool()
    def search_merchandise(
        team: Annotated[str | None, Field(description="Filter by team name (e.g. 'Thunderbolts')")] = None,
        category: Annotated[
            str | None, Field(description=f"Filter by category (e.g. {', '.join(MERCH_CATEGORIES)})")
        ] = None,
        player: Annotated[str | None, Field(description="Filter by player name")] = None,
        max_price: Annotated[float | None, Field(description="Maximum price filter")] = None,
        in_stock_only: Annotated[bool, Field(description="Only show in-stock items (default: true)")] = True,
    ) -> str:
        """Search the merchandise catalog with optional filters for team, category, player, and price range."""
        return _respond(
            "search_merchandise",
            lambda: service.search_merchandise(team, category, player, max_price, in_stock_only),
        )

    @mcp.tool()
    def get_merch_recommendations(
        fan_id: Annotated[str, Field(description="The fan ID to generate recommendations for")],
        max_results: Annotated[
            int | None, Field(description="Maximum number of recommendations to return (default: 5)")
        ] = None,
    ) -> str:
        """Get personalized merchandise recommendations for a fan based on their profile, engagement history, and purchase patterns."""
        return _respond(
            "get_merch_recommendations",
            lambda: service.get_merch_recommendations(fan_id, max_results),
        )

    @mcp.tool()
    def create_promotion(
        name: Annotated[str, Field(description="Name for the promotion")],
        description: Annotated[str, Field(description="Description of the promotion")],
        discount_percent: Annotated[float, Field(description="Discount percentage (e.g. 15 for 15% off)")],
        target_segment: Annotated[
            str,
            Field(description="Target fan segment: all, high_engagement, low_engagement, no_purchases, specific_team"),
        ],
        product_category: Annotated[
            str, Field(description="Product category to apply promotion to (e.g. 'Jersey', 'Hat', or 'all')")
        ],
        start_date: Annotated[
            date | None, Field(description="Start date in YYYY-MM-DD format (defaults to today)")
        ] = None,
        end_date: Annotated[
            date | None, Field(description="End date in YYYY-MM-DD format (defaults to 30 days from start)")
        ] = None,
    ) -> str:
        """Create a targeted promotion or discount offer for a specific fan segment and product category."""
        return _respond(
            "create_promotion",
            lambda: service.create_promotion(
                name,
                description,
                discount_percent,
                target_segment,
                product_category,
                start_date,
                end_date,
            ),
        )

    @mcp.tool()
    def get_fan_segments(
        team: Annotated[str | None, Field(description="Optional team filter (case-insensitive substring)")] = None,
    ) -> str:
        """Get fan segments based on engagement and purchase behavior: superfans, engaged non-buyers, low-engagement buyers, casual and dormant fans."""
        return _respond("get_fan_segments", lambda: service.get_fan_segments(team))

    logger.info("mcp_server_built", server=SERVER_NAME, tools=len(TOOL_NAMES))
    return mcp
