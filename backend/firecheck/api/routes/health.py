"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 if the persistence adapter is unreachable

Design Decisions:
    - Readiness probes through the store, not a DB handle: works for either adapter
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from firecheck.api.dependencies import get_store
from firecheck.services.inspection_store import InspectionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "firecheck-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(store: InspectionStore = Depends(get_store)):
    """Readiness probe — includes persistence connectivity."""
    if not await store.check_persistence():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "persistence_unavailable"},
        )
    return {"status": "ready", "checks": {"persistence": "healthy"}}
