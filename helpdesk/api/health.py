"""
Health check endpoint.

WHY: Allows load balancers and monitoring to verify the service and its
database without authentication.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from helpdesk.core.config import settings
from helpdesk.db.session import Database, get_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health_check(database: Database = Depends(get_database)) -> JSONResponse:
    """
    Ping the database.

    Returns 200 when SELECT 1 succeeds and 503 otherwise. Driver error text
    is logged, not returned.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await database.ping()
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "unreachable",
                "timestamp": timestamp,
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "version": settings.VERSION,
            "database": "connected",
            "timestamp": timestamp,
        },
    )
