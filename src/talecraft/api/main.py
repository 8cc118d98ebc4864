"""FastAPI application entry point.

Main application configuration, interceptors, and startup lifecycle.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
import logging

from fastapi import FastAPI

from talecraft.api.exceptions import register_exception_handlers
from talecraft.api.middleware import build_middleware
from talecraft.api.routers import auth, comments, health, stories
from talecraft.core.config import Settings, get_settings
from talecraft.core.logging import configure_logging
from talecraft.models.database import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Initialize database connection pool

    Shutdown:
    - Close database connections
    """
    settings: Settings = app.state.settings

    logger.info("Initializing database connection...")
    init_db(
        settings.async_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-derived ones

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="TaleCraft API",
        description="Collaborative storytelling with role-scoped story access",
        version=settings.app_version,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
        openapi_url="/api/openapi.json" if not settings.is_production else None,
        middleware=build_middleware(settings),
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(health.router, tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(stories.router, prefix="/api/stories", tags=["stories"])
    app.include_router(comments.router, prefix="/api", tags=["comments"])

    register_exception_handlers(app)

    return app


# Application instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "talecraft.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        workers=settings.workers if settings.is_production else 1,
    )
