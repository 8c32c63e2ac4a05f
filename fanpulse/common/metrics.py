"""Prometheus metrics definitions and FastAPI middleware for FanPulse.

Exposes counters, histograms, and gauges for every operation the MCP and
REST surfaces serve, from tool invocations through segment classification,
recommendation scoring, and promotion reach estimation.  A lightweight
middleware instruments HTTP request duration and status codes when the
server runs in HTTP mode.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

# --------------------------------------------------------------------------- #
# Counters                                                                     #
# --------------------------------------------------------------------------- #
tool_invocations_total = Counter(
    "fanpulse_tool_invocations_total",
    "Operations invoked through the MCP or REST surfaces.",
    labelnames=["tool", "outcome"],
)

engagement_events_logged_total = Counter(
    "fanpulse_engagement_events_logged_total",
    "Engagement events recorded, by event kind.",
    labelnames=["event_type"],
)

promotions_created_total = Counter(
    "fanpulse_promotions_created_total",
    "Promotions created, by target segment keyword.",
    labelnames=["target_segment"],
)

reach_estimation_failures_total = Counter(
    "fanpulse_reach_estimation_failures_total",
    "Reach estimates that fell back to zero after a query failure.",
    labelnames=["target_segment"],
)

# --------------------------------------------------------------------------- #
# Histograms                                                                   #
# --------------------------------------------------------------------------- #
tool_latency_seconds = Histogram(
    "fanpulse_tool_latency_seconds",
    "Wall-clock latency of a single operation.",
    labelnames=["tool"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

recommendations_returned = Histogram(
    "fanpulse_recommendations_returned",
    "Number of recommendations returned per request.",
    buckets=(0, 1, 2, 3, 5, 10, 20),
)

# --------------------------------------------------------------------------- #
# Gauges                                                                       #
# --------------------------------------------------------------------------- #
segment_members = Gauge(
    "fanpulse_segment_members",
    "Fans assigned to each segment by the most recent classification.",
    labelnames=["segment"],
)


@contextmanager
def track_tool(tool: str) -> Iterator[dict[str, str]]:
    """Time an operation and count it by outcome.

    The caller may set ``state["outcome"]`` explicitly.  An escaping
    ``LookupError`` records ``"not_found"``, any other exception ``"error"``.
    """
    state = {"outcome": "ok"}
    start = time.perf_counter()
    try:
        yield state
    except LookupError:
        state["outcome"] = "not_found"
        raise
    except Exception:
        state["outcome"] = "error"
        raise
    finally:
        tool_latency_seconds.labels(tool=tool).observe(time.perf_counter() - start)
        tool_invocations_total.labels(tool=tool, outcome=state["outcome"]).inc()


# --------------------------------------------------------------------------- #
# FastAPI Prometheus middleware                                                 #
# --------------------------------------------------------------------------- #
_http_requests_total = Counter(
    "fanpulse_http_requests_total",
    "Total HTTP requests handled.",
    labelnames=["method", "endpoint", "status_code"],
)

_http_request_duration_seconds = Histogram(
    "fanpulse_http_request_duration_seconds",
    "HTTP request duration in seconds.",
    labelnames=["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records request count and latency."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        method = request.method
        path = request.url.path
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - start

        _http_requests_total.labels(
            method=method,
            endpoint=path,
            status_code=response.status_code,
        ).inc()
        _http_request_duration_seconds.labels(
            method=method,
            endpoint=path,
        ).observe(elapsed)
        return response


# --------------------------------------------------------------------------- #
# Metrics app factory                                                          #
# --------------------------------------------------------------------------- #
def get_metrics_app() -> FastAPI:
    """Return a minimal FastAPI application that serves ``/metrics``.

    Its router is included by the HTTP app so Prometheus can scrape the
    same port that serves MCP.
    """
    app = FastAPI(title="FanPulse Metrics", docs_url=None, redoc_url=None)

    @app.get("/metrics", include_in_schema=False)
    async def metrics_endpoint() -> StarletteResponse:
        body = generate_latest(REGISTRY)
        return StarletteResponse(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app
