"""
VoidBox - FastAPI Application Entry Point.

This module provides the main FastAPI application instance with all
middleware, routes, exception handlers, and lifecycle management.
"""

import asyncio
import os
from contextlib import asynccontextmanager, suppress
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.routes import router as api_router, health_router
from src.config.constants import SERVICE_NAME, SERVICE_VERSION, SERVICE_DESCRIPTION
from src.config.settings import get_settings, Settings
from src.database import initialize_databases, shutdown_databases
from src.exceptions import setup_exception_handlers
from src.jobs.cleanup import periodic_cleanup
from src.utils.logger import setup_logging, get_logger

# Initialize logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL.value, settings.LOG_FORMAT)

    logger.info(
        "VoidBox starting",
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT.value,
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT
    )

    validate_configuration(settings)
    await initialize_databases()
    cleanup_task = start_background_tasks(settings)

    logger.info("VoidBox startup completed")
    try:
        yield
    finally:
        logger.info("Shutting down VoidBox...")
        await stop_background_tasks(cleanup_task)
        await shutdown_databases()
        logger.info("VoidBox shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="VoidBox API",
        description=SERVICE_DESCRIPTION,
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    setup_exception_handlers(app)
    setup_routes(app, settings)

    return app


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware."""

    # Request logging, request ID and processing time
    app.middleware("http")(LoggingMiddleware())

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials="*" not in settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
            "Accept",
        ],
        expose_headers=[
            "X-Request-ID",
            "X-Process-Time",
            "Content-Disposition",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ]
    )


def setup_routes(app: FastAPI, settings: Settings) -> None:
    """Setup application routes and endpoints."""
    app.include_router(health_router)
    app.include_router(api_router)

    static_dir = settings.STATIC_DIR
    if static_dir and os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="spa")
        logger.info("Serving single-page application", directory=static_dir)
        return

    if static_dir:
        logger.warning("Static directory not found, SPA not served", directory=static_dir)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root():
        return "VoidBox backend is running."


def validate_configuration(settings: Settings) -> None:
    """Validate service configuration."""
    if not settings.has_telegram_credentials():
        logger.warning("TG_API_ID / TG_API_HASH not set, Telegram login will not work")

    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("Rate limiting is disabled")

    logger.info("Configuration validation completed")


def start_background_tasks(settings: Settings) -> Optional[asyncio.Task]:
    """Start the periodic cleanup when configured."""
    if settings.CLEANUP_INTERVAL_SECONDS <= 0:
        return None
    return asyncio.create_task(periodic_cleanup(settings.CLEANUP_INTERVAL_SECONDS))


async def stop_background_tasks(task: Optional[asyncio.Task]) -> None:
    """Cancel the periodic cleanup."""
    if task is None:
        return

    task.cancel()
    with suppress(asyncio.CancelledError):
        await task
    logger.info("Background tasks stopped")


def main() -> None:
    """Main entry point for running the service."""
    settings = get_settings()

    uvicorn_config = {
        "app": "src.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "log_level": settings.LOG_LEVEL.value.lower(),
        "access_log": False,
        "server_header": False,
    }

    # Development-specific settings
    if settings.is_development():
        uvicorn_config.update({
            "reload": settings.DEBUG,
            "reload_dirs": ["src/"],
        })

    logger.info(
        "Starting VoidBox server",
        service=SERVICE_NAME,
        host=settings.HOST,
        port=settings.PORT,
        environment=settings.ENVIRONMENT.value
    )

    uvicorn.run(**uvicorn_config)


# Create the FastAPI app instance
app = create_app()

if __name__ == "__main__":
    main()
