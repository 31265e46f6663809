"""
Optionality OS Main Application

Central entry point for the FastAPI backend. Hosts the decision-scoring
engine behind a request boundary, with Prometheus metrics, optional Sentry
error tracking and per-client rate limiting.
"""

import datetime
import logging
from contextlib import asynccontextmanager

from .config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("OptionalityOS")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from . import models
from .database import engine
from .engine import available_rule_sets
from .exceptions import OptionalityException

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])

# --- Monitoring & Error Tracking ---
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from .middleware.monitoring import PrometheusMiddleware, get_metrics

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        traces_sample_rate=1.0,
    )


@asynccontextmanager
async def lifespan(app):
    settings.print_startup_summary()
    try:
        models.Base.metadata.create_all(bind=engine)
        logger.info("Database tables ready")
    except Exception as e:
        # scoring still works without storage; saved assessments will fail
        logger.error(f"Database initialization failed: {e}")
    yield


# --- App Initialization ---
app = FastAPI(
    title="Optionality OS API",
    version="2.0.0",
    description="Decision-scoring engine: optionality, reversibility and structural resilience",
    lifespan=lifespan,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# 1. Prometheus Middleware
app.add_middleware(PrometheusMiddleware)

# 2. Rate limiting
app.add_middleware(SlowAPIMiddleware)

# 3. CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---
@app.exception_handler(OptionalityException)
async def optionality_exception_handler(request: Request, exc: OptionalityException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        {"detail": exc.message, "error_code": exc.error_code},
        status_code=exc.status_code,
    )


# --- Routes ---

@app.get("/health")
def health_check():
    """Service health check for load balancers / monitoring."""
    return {
        "status": "healthy",
        "rule_sets": list(available_rule_sets()),
        "timestamp": datetime.datetime.now().isoformat(),
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return get_metrics()


# --- Include Modules ---
from .api import assessments, portfolio

app.include_router(assessments.router)
app.include_router(portfolio.router)
