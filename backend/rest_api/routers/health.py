"""
Health check endpoints for the REST API.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import get_db

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {"status": "ok", "message": "ViewSet API is running"}


@router.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """
    Health check that verifies database connectivity.

    Returns 503 Service Unavailable if the database is down.
    """
    checks = {
        "status": "ok",
        "environment": settings.environment,
        "dependencies": {"database": {"status": "ok"}},
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        checks["status"] = "degraded"
        checks["dependencies"]["database"] = {"status": "down", "error": type(e).__name__}
        return JSONResponse(content=checks, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return checks
