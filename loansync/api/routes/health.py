"""Health Routes — process liveness and database readiness.

Invariants:
    - GET /health/ answers 200 whenever the app is serving
    - GET /health/ready answers 503 until db_manager can run a query
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import loansync.infrastructure.database as database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "loansync-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
