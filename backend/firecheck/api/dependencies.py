"""API Dependencies — hands the session's store to route handlers.

Invariants:
    - The store lives on app.state, placed there by the lifespan (composition root)
    - Missing store -> 503, never a half-initialized store

Design Decisions:
    - FastAPI dependency over module import: tests swap the store with
      app.dependency_overrides, exactly like a DB session override
"""

from fastapi import HTTPException, Request, status

from firecheck.services.inspection_store import InspectionStore


def get_store(request: Request) -> InspectionStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store not initialized",
        )
    return store
