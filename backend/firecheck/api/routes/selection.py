"""Selection Routes — the session's current site and current inspection pointers.

Invariants:
    - PUT replaces only the pointers present in the body; null clears one
    - Selecting an id that does not exist is a 404 and changes nothing
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from firecheck.api.dependencies import get_store
from firecheck.core.domain_types import InspectionId, SiteId
from firecheck.services.inspection_store import InspectionStore

router = APIRouter(prefix="/api/v1/selection", tags=["selection"])


class SelectionUpdate(BaseModel):
    site_id: str | None = None
    inspection_id: str | None = None


def _selection(store: InspectionStore) -> dict:
    return {
        "current_site": store.current_site,
        "current_inspection": store.current_inspection,
    }


@router.get("")
async def get_selection(store: InspectionStore = Depends(get_store)):
    return _selection(store)


@router.put("")
async def update_selection(
    body: SelectionUpdate, store: InspectionStore = Depends(get_store),
):
    fields = body.model_fields_set
    # Existence checked for both before either pointer moves
    if body.site_id is not None:
        store.get_site(SiteId(body.site_id))
    if body.inspection_id is not None:
        store.get_inspection(InspectionId(body.inspection_id))
    if "site_id" in fields:
        store.set_current_site(SiteId(body.site_id) if body.site_id else None)
    if "inspection_id" in fields:
        store.set_current_inspection(
            InspectionId(body.inspection_id) if body.inspection_id else None,
        )
    return _selection(store)
