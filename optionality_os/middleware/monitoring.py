"""
Monitoring Middleware and Prometheus instrumentation for Optionality OS.

Captures request latencies, status codes, and scoring outcomes.
"""

import time
import logging
from typing import Callable, Optional
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# --- Metrics Definition ---

try:
    # Request Metrics
    REQUEST_COUNT = Counter(
        "api_request_total",
        "Total count of HTTP requests",
        ["method", "path", "status_code"]
    )

    REQUEST_LATENCY = Histogram(
        "api_request_latency_seconds",
        "Latency of HTTP requests in seconds",
        ["method", "path"]
    )

    # Scoring Metrics
    ASSESSMENTS_SCORED = Counter(
        "assessments_scored_total",
        "Total count of scored assessments",
        ["rule_set", "classification"]
    )

    HEADLINE_SCORE = Histogram(
        "assessment_headline_score",
        "Headline metric per scored assessment",
        ["rule_set"],
        buckets=(0, 5, 10, 15, 25, 50, 70, 85, 100, 250)
    )
except ValueError:
    # Metrics already registered
    from prometheus_client import REGISTRY
    REQUEST_COUNT = REGISTRY._names_to_collectors["api_request_total"]
    REQUEST_LATENCY = REGISTRY._names_to_collectors["api_request_latency_seconds"]
    ASSESSMENTS_SCORED = REGISTRY._names_to_collectors["assessments_scored_total"]
    HEADLINE_SCORE = REGISTRY._names_to_collectors["assessment_headline_score"]


# --- Middleware Implementation ---

class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Don't monitor /metrics itself to avoid noise
        if request.url.path.rstrip("/") == "/metrics":
            return await call_next(request)

        method = request.method
        # route template keeps label cardinality bounded (no per-key paths)
        route = request.scope.get("route")
        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            route = request.scope.get("route") or route
            path = getattr(route, "path", request.url.path)
            latency = time.time() - start_time
            REQUEST_COUNT.labels(method=method, path=path, status_code=status_code).inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(latency)

        return response

# --- Helper functions ---

def get_metrics():
    """Generates the latest metrics scrapable by Prometheus."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

def instrument_assessment(rule_set: str, classification: Optional[str], headline: float):
    """
    Update Prometheus metrics for one scored assessment.
    """
    ASSESSMENTS_SCORED.labels(rule_set=rule_set, classification=classification or "none").inc()
    HEADLINE_SCORE.labels(rule_set=rule_set).observe(headline)
    logger.debug(f"Metrics updated: {rule_set}, classification={classification}, headline={headline}")
