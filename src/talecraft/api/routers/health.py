"""Health check endpoints."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from talecraft.models.database import get_engine

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    success: bool
    message: str
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the server is up."""
    return HealthResponse(
        success=True,
        message="Server is running",
        timestamp=datetime.now(UTC),
    )


@router.get("/health/db")
async def database_check() -> dict:
    """Check database connectivity.

    Reports the database state in the body rather than failing the request.
    """
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except RuntimeError:
        return {"success": False, "database": "not initialized"}
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)
        return {"success": False, "database": "error"}
    return {"success": True, "database": "healthy"}
