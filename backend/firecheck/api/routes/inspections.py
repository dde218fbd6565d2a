"""Inspection Routes — inspections, their issues, and the report data contract.

Invariants:
    - Issue routes are scoped: an issue id that belongs to another inspection is a 404
    - GET /{id}/report returns Report.to_dict(), the only shape renderers consume

Design Decisions:
    - Issues nested under their inspection: mirrors the ownership in the data model
"""

import logging

from fastapi import APIRouter, Depends, status

from firecheck.api.dependencies import get_store
from firecheck.core.domain_types import EntityKind, InspectionId, IssueId
from firecheck.core.errors import ResourceNotFoundError
from firecheck.core.records import Issue
from firecheck.schemas.payloads import (
    InspectionCreate, InspectionUpdate, IssueCreate, IssueUpdate,
)
from firecheck.services.inspection_store import InspectionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/inspections", tags=["inspections"])


def get_scoped_issue(
    store: InspectionStore, inspection_id: str, issue_id: str,
) -> Issue:
    """Issue of this inspection, or 404."""
    store.get_inspection(InspectionId(inspection_id))
    issue = store.get_issue(IssueId(issue_id))
    if issue.inspection_id != inspection_id:
        raise ResourceNotFoundError(EntityKind.ISSUE.value, issue_id)
    return issue


@router.get("")
async def list_inspections(store: InspectionStore = Depends(get_store)):
    """All inspections (with issues), newest first."""
    return {"inspections": store.list_inspections()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_inspection(
    body: InspectionCreate, store: InspectionStore = Depends(get_store),
):
    return await store.create_inspection(body)


@router.get("/{inspection_id}")
async def get_inspection(
    inspection_id: str, store: InspectionStore = Depends(get_store),
):
    return store.get_inspection(InspectionId(inspection_id))


@router.patch("/{inspection_id}")
async def update_inspection(
    inspection_id: str,
    body: InspectionUpdate,
    store: InspectionStore = Depends(get_store),
):
    return await store.update_inspection(InspectionId(inspection_id), body)


@router.delete("/{inspection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inspection(
    inspection_id: str, store: InspectionStore = Depends(get_store),
):
    await store.delete_inspection(InspectionId(inspection_id))


@router.get("/{inspection_id}/report")
async def get_report(
    inspection_id: str, store: InspectionStore = Depends(get_store),
):
    """Grouped, ordered report data for every renderer."""
    return store.report_for(InspectionId(inspection_id)).to_dict()


# --- Issues -------------------------------------------------------------------

@router.post("/{inspection_id}/issues", status_code=status.HTTP_201_CREATED)
async def add_issue(
    inspection_id: str,
    body: IssueCreate,
    store: InspectionStore = Depends(get_store),
):
    return await store.add_issue(InspectionId(inspection_id), body)


@router.patch("/{inspection_id}/issues/{issue_id}")
async def update_issue(
    inspection_id: str,
    issue_id: str,
    body: IssueUpdate,
    store: InspectionStore = Depends(get_store),
):
    get_scoped_issue(store, inspection_id, issue_id)
    return await store.update_issue(IssueId(issue_id), body)


@router.delete(
    "/{inspection_id}/issues/{issue_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_issue(
    inspection_id: str, issue_id: str, store: InspectionStore = Depends(get_store),
):
    get_scoped_issue(store, inspection_id, issue_id)
    await store.delete_issue(IssueId(issue_id))
