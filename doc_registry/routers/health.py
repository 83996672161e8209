"""
Health Check Router

Liveness and readiness endpoints for monitoring and load balancers.
"""

from fastapi import APIRouter
from sqlalchemy import text

from doc_registry.config import get_settings
from doc_registry.core.database import DbSession
from doc_registry.models.contracts.common import HealthResponse

router = APIRouter(tags=["health"])

SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. Does not touch the database."""
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        environment=get_settings().environment,
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(db: DbSession) -> HealthResponse:
    """
    Readiness check.

    An unreachable database surfaces as OperationalError, which the
    application maps to 503.

    Returns:
        HealthResponse with database status
    """
    await db.execute(text("SELECT 1"))
    return HealthResponse(
        status="healthy",
        version=SERVICE_VERSION,
        environment=get_settings().environment,
        database="connected",
    )
