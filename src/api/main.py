"""
FastAPI application for the invitation-gated registration API.

Wires the v1 routes to a PostgreSQL connection pool whose lifetime
follows the application: the pool is opened and the token/account
tables are migrated at startup, and the pool is closed at shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Invitation-gated registration API v1 - Verify tokens and create accounts",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the token store for the lifetime of the application.

    Startup creates the connection pool and applies the tokens/accounts
    migrations; shutdown closes the pool.
    """
    settings = get_settings()

    logger.info(
        "Opening token store pool (min=%d, max=%d)",
        settings.pool_min_size,
        settings.pool_max_size,
    )

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    # Create tokens and accounts tables if missing
    logger.info("Applying token and account migrations...")
    run_migrations(pool)

    # Store pool in app state for dependency injection
    app.state.pool = pool

    if not settings.admin_api_key:
        logger.warning("ADMIN_API_KEY is not set, POST /v1/tokens will refuse every request")

    logger.info("Registration API ready")

    yield

    # Shutdown
    pool.close()
    logger.info("Token store pool closed")


app = FastAPI(
    title="nimo-register",
    description="Invitation-gated registration API - Verify an invitation token, then create an account",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with token store validation.

    Returns 200 OK if the application can reach the database.
    Raises exception if the database connection fails.
    """
    # Validate database connectivity
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
