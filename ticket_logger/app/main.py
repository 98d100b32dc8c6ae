"""
FastAPI Application Entry Point.

This is the main application file for the Ticket Logger backend: the ticket
REST API under `/api`, a health check, and the frontend bundle with SPA fallback.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ticket_logger.app.api.endpoints import health
from ticket_logger.app.api.router import router as api_router
from ticket_logger.app.core.config import Settings, settings
from ticket_logger.app.core.exceptions import register_exception_handlers
from ticket_logger.app.core.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from ticket_logger.app.core.observability import ObservabilityMiddleware, configure_logging
from ticket_logger.app.core.rate_limit import (
    MemoryWindowCounter,
    RateLimitMiddleware,
    RedisWindowCounter,
    WindowCounter,
)
from ticket_logger.app.core.redis_client import create_redis_client, ping_redis
from ticket_logger.app.core.static_files import SPAStaticFiles
from ticket_logger.app.db.session import Database

# Import models to ensure they are registered with Base
from ticket_logger.app.models.ticket import Ticket

logger = logging.getLogger("ticket_logger")

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Opens the database handle, checks connectivity and creates tables.
    2. On shutdown (SIGINT/SIGTERM via uvicorn) drains database connections
       and closes the Redis client.
    """
    app_settings: Settings = app.state.settings
    database = Database(
        app_settings.database_url,
        echo=app_settings.db_echo,
        pool_size=app_settings.db_pool_size,
        max_overflow=app_settings.db_max_overflow,
    )
    app.state.database = database

    if await database.ping():
        logger.info("Successfully connected to the database")
        if app_settings.db_create_tables:
            await database.create_tables()

    redis_client = app.state.redis
    if redis_client is not None and not await ping_redis(redis_client):
        logger.warning("Redis is unreachable; rate limiting will fail open")

    logger.info("Server running on port %s", app_settings.port)
    try:
        yield
    finally:
        await database.dispose()
        if redis_client is not None:
            await redis_client.aclose()
        logger.info("Shutdown complete")


def build_rate_counter(app: FastAPI, app_settings: Settings) -> WindowCounter:
    if app_settings.rate_limit_redis_url:
        app.state.redis = create_redis_client(app_settings.rate_limit_redis_url)
        return RedisWindowCounter(app.state.redis, app_settings.rate_limit_window_seconds)
    return MemoryWindowCounter(app_settings.rate_limit_window_seconds)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its middleware chain, routes and error handlers."""
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
        description="Ticket logging API with filtered listing and CSV export",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.redis = None

    # Added innermost first: the last middleware added runs first
    app.add_middleware(
        RateLimitMiddleware,
        counter=build_rate_counter(app, app_settings),
        limit=app_settings.rate_limit_max,
        path_prefix=f"{API_PREFIX}/",
    )
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=app_settings.max_body_bytes)
    app.add_middleware(ObservabilityMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix=API_PREFIX)
    app.include_router(health.router)

    static_dir = Path(app_settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", SPAStaticFiles(directory=str(static_dir), api_prefix=API_PREFIX.strip("/")), name="frontend")
    else:
        @app.get("/", tags=["Root"])
        async def root():
            return {"message": "Backend API is running"}

    return app


configure_logging(settings.log_level)
app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
