"""
signup-gate FastAPI application.

Builds the app, its shared resources (database pool, outbound HTTP client,
metrics, the registration service) and the operational endpoints.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from psycopg_pool import AsyncConnectionPool

from src.adapters.metrics import InMemoryMetricsSink
from src.adapters.repository.postgres import run_migrations
from src.api.dependencies import build_registration_service
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Signup API v1 - Create accounts, with email confirmation for risky attempts",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and HTTP client on startup
    - Runs migrations on startup
    - Waits for pending signup notifications, then closes resources on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting signup-gate, database pool %d-%d", settings.pool_min_size, settings.pool_max_size)

    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    await pool.open()

    logger.info("Applying migrations")
    await run_migrations(pool)

    http_client = httpx.AsyncClient(timeout=settings.ip_reputation_timeout)
    metrics = InMemoryMetricsSink()
    service = build_registration_service(settings, pool, http_client, metrics)

    # Store shared objects in app state for dependency injection
    app.state.pool = pool
    app.state.metrics = metrics
    app.state.registration_service = service

    logger.info("Signup service ready (rate limit enforced: %s)", settings.rate_limit_enabled)

    yield

    # Shutdown
    logger.info("Waiting for pending signup notifications")
    await service.drain()
    await http_client.aclose()
    await pool.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="signup-gate",
    description="Signup API - Risk-based email confirmation and hasher rate limiting for new accounts",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Liveness plus a database round trip.

    A failing database surfaces as a server error.
    """
    pool = request.app.state.pool
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")

    return {"status": "healthy"}


@app.get("/metrics")
async def metrics(request: Request) -> dict[str, int]:
    """Current signup counters (attempts per channel, risk reason distribution)."""
    return request.app.state.metrics.snapshot()
