"""Site Routes — registration, update, cascade delete and per-site inspection lists.

Invariants:
    - Bodies validated by the payload schemas, then re-checked by the store
    - DELETE removes the site's inspections and issues in the same call (204)
"""

import logging

from fastapi import APIRouter, Depends, status

from firecheck.api.dependencies import get_store
from firecheck.core.domain_types import SiteId
from firecheck.schemas.payloads import SiteCreate, SiteUpdate
from firecheck.services.inspection_store import InspectionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sites", tags=["sites"])


@router.get("")
async def list_sites(store: InspectionStore = Depends(get_store)):
    """All sites, newest first."""
    return {"sites": store.list_sites()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_site(
    body: SiteCreate, store: InspectionStore = Depends(get_store),
):
    return await store.create_site(body)


@router.get("/{site_id}")
async def get_site(site_id: str, store: InspectionStore = Depends(get_store)):
    return store.get_site(SiteId(site_id))


@router.patch("/{site_id}")
async def update_site(
    site_id: str, body: SiteUpdate, store: InspectionStore = Depends(get_store),
):
    return await store.update_site(SiteId(site_id), body)


@router.delete("/{site_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site(site_id: str, store: InspectionStore = Depends(get_store)):
    await store.delete_site(SiteId(site_id))


@router.get("/{site_id}/inspections")
async def list_site_inspections(
    site_id: str, store: InspectionStore = Depends(get_store),
):
    store.get_site(SiteId(site_id))
    return {"inspections": store.inspections_for_site(SiteId(site_id))}
