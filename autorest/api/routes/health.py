"""Health & Readiness Probes - liveness and readiness endpoints for container orchestration.

Invariants:
    - GET {prefix}/health/ always returns 200 if process is up (liveness)
    - GET {prefix}/health/ready returns 503 if database is unreachable (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - db_manager read through the module at call time: it is created in the lifespan
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import autorest
from autorest.infrastructure import database

logger = logging.getLogger(__name__)
HEALTH_PATH = "health"
router = APIRouter(prefix=f"/{HEALTH_PATH}", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "autorest",
        "version": autorest.__version__,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe - includes database connectivity."""
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
