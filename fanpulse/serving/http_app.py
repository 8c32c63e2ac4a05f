"""FastAPI app serving FanPulse over HTTP.

Hosts the MCP streamable-HTTP endpoint at ``/mcp`` for browser-based chat
dashboards, plus plain REST routes over the same service, ``/health`` and a
Prometheus ``/metrics`` sub-app.  CORS is open so a locally served dashboard
can reach it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import date
from typing import Any

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fanpulse.common import settings
from fanpulse.common.logging_config import new_correlation_id, set_correlation_id
from fanpulse.common.metrics import PrometheusMiddleware, get_metrics_app, track_tool
from fanpulse.serving.fan_service import FanNotFoundError, FanPulseService
from fanpulse.serving.mcp_server import build_mcp_server
from fanpulse.storage.models.fan import WireModel

logger = structlog.get_logger(__name__)


# ── Request schemas ───────────────────────────────────────────────────


class EngagementEventIn(WireModel):
    event_type: str
    details: str
    event_date: date | None = None


class PromotionIn(WireModel):
    name: str
    description: str
    discount_percent: float
    target_segment: str
    product_category: str
    start_date: date | None = None
    end_date: date | None = None


# ── Dependencies ──────────────────────────────────────────────────────


def _get_service(request: Request) -> FanPulseService:
    """Return the service bound at app creation; tests pass their own."""
    return request.app.state.service


def create_app(service: FanPulseService, mount_mcp: bool = True) -> FastAPI:
    """Build the HTTP app around *service*.

    With ``mount_mcp`` the MCP session manager runs for the app's lifetime
    and its endpoint is mounted last so REST routes take precedence.
    """
    mcp = build_mcp_server(service) if mount_mcp else None
    mcp_app = mcp.streamable_http_app() if mcp is not None else None

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            if mcp is not None:
                await stack.enter_async_context(mcp.session_manager.run())
            logger.info("http_app_started", mcp_mounted=mcp is not None)
            yield

    app = FastAPI(title="FanPulse API", version=settings.SERVICE_VERSION, lifespan=lifespan)
    app.state.service = service
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )

    @app.middleware("http")
    async def correlation(request: Request, call_next):  # type: ignore[no-untyped-def]
        cid = request.headers.get("X-Request-ID")
        if cid:
            set_correlation_id(cid)
        else:
            cid = new_correlation_id()
        response = await call_next(request)
        response.headers["X-Request-ID"] = cid
        return response

    @app.exception_handler(FanNotFoundError)
    async def fan_not_found(_request: Request, exc: FanNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content=exc.to_wire())

    _register_routes(app)
    app.include_router(get_metrics_app().router)
    if mcp_app is not None:
        app.mount("/", mcp_app)
    return app


# ── Endpoints ─────────────────────────────────────────────────────────


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/fans/{identifier}")
    def get_fan_profile(
        identifier: str,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("get_fan_profile"):
            return service.get_fan_profile(identifier).to_wire()

    @app.post("/fans/{fan_id}/events", status_code=201)
    def log_engagement_event(
        fan_id: str,
        body: EngagementEventIn,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("log_engagement_event"):
            return service.log_engagement_event(
                fan_id, body.event_type, body.details, body.event_date
            ).to_wire()

    @app.get("/fans/{fan_id}/engagement")
    def get_fan_engagement_metrics(
        fan_id: str,
        lookback_days: int | None = None,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("get_fan_engagement_metrics"):
            return service.get_fan_engagement_metrics(fan_id, lookback_days).to_wire()

    @app.get("/engagement")
    def rank_fan_engagement(
        lookback_days: int | None = None,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("get_fan_engagement_metrics"):
            return service.rank_fan_engagement(lookback_days).to_wire()

    @app.get("/merchandise")
    def search_merchandise(
        team: str | None = None,
        category: str | None = None,
        player: str | None = None,
        max_price: float | None = None,
        in_stock_only: bool = True,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("search_merchandise"):
            return service.search_merchandise(
                team, category, player, max_price, in_stock_only
            ).to_wire()

    @app.get("/fans/{fan_id}/recommendations")
    def get_merch_recommendations(
        fan_id: str,
        max_results: int | None = None,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("get_merch_recommendations"):
            return service.get_merch_recommendations(fan_id, max_results).to_wire()

    @app.post("/promotions", status_code=201)
    def create_promotion(
        body: PromotionIn,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("create_promotion"):
            return service.create_promotion(
                body.name,
                body.description,
                body.discount_percent,
                body.target_segment,
                body.product_category,
                body.start_date,
                body.end_date,
            ).to_wire()

    @app.get("/segments")
    def get_fan_segments(
        team: str | None = None,
        service: FanPulseService = Depends(_get_service),  # noqa: B008
    ) -> dict[str, Any]:
        with track_tool("get_fan_segments"):
            return service.get_fan_segments(team).to_wire()
