"""History Routes — autocomplete suggestions for issue descriptions and locations.

Invariants:
    - Read-only: history only grows as a side effect of issue writes
    - limit omitted -> the configured default (20 descriptions / 10 locations)
"""

from fastapi import APIRouter, Depends, Query

from firecheck.api.dependencies import get_store
from firecheck.services.inspection_store import InspectionStore

router = APIRouter(prefix="/api/v1/history", tags=["history"])


@router.get("/descriptions")
async def top_descriptions(
    limit: int | None = Query(None, ge=1, le=100),
    store: InspectionStore = Depends(get_store),
):
    """Most frequently used issue descriptions."""
    return {"entries": store.top_issue_descriptions(limit)}


@router.get("/locations")
async def top_locations(
    limit: int | None = Query(None, ge=1, le=100),
    store: InspectionStore = Depends(get_store),
):
    """Most recently used issue locations."""
    return {"entries": store.top_locations(limit)}
