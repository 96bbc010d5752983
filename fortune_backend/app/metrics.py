"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et métier (fortunes générées, doublons, blocages de rate
limit, connexions administrateur) et expose l'endpoint `/metrics`.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Business metrics
FORTUNES_GENERATED = Counter(
    "fortunes_generated_total",
    "Fortunes generated and persisted",
)
FORTUNE_DUPLICATES = Counter(
    "fortune_duplicates_total",
    "Submissions rejected because the email already has a fortune",
)
RATE_LIMIT_BLOCKS = Counter(
    "rate_limit_blocks_total",
    "Requests blocked by rate limiting",
    ["limiter"],
)
ADMIN_LOGINS = Counter(
    "admin_logins_total",
    "Admin login attempts",
    ["result"],
)


def route_template(request: Request) -> str:
    """Gabarit de route (ex. `/admin/fortunes/{fortune_id}`) pour limiter la cardinalité."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Compte et chronomètre chaque requête HTTP."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        route = route_template(request)
        REQUEST_LATENCY.labels(route=route).observe(time.perf_counter() - start)
        REQUEST_COUNT.labels(
            method=request.method, route=route, status=str(response.status_code)
        ).inc()
        return response


@metrics_router.get("/metrics")
def metrics() -> Response:
    """Expose les métriques au format Prometheus."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
