"""Inspection Store — the session's single source of truth for sites, inspections and issues.

Invariants:
    - Every write: validate (sync) -> check references -> await adapter -> apply_mutation
    - Validation and reference errors are raised BEFORE the adapter is called
    - Adapter errors propagate unchanged and leave the snapshot untouched (same object)
    - The snapshot is swapped, never mutated: `store.snapshot is old` means "no change"
    - Nothing suspends between the adapter result and the snapshot swap
    - History updates after an issue write are background tasks whose failures are
      logged by HistoryTracker and never reach the caller

Design Decisions:
    - Explicitly constructed per session by the composition root (no module-level store)
    - Imperative shell around the functional core: IO here, transitions in
      core/store_state.py, grouping in core/aggregate_issues.py
    - The store never knows which adapter it has; cascade atomicity is the adapter's
      contract, so delete_site/delete_inspection issue ONE remove call
    - No retries and no optimistic-concurrency check: last successful write wins
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from pydantic import BaseModel

from firecheck.core.build_report import Report, build_report
from firecheck.core.domain_types import (
    FACILITY_RANK, EntityKind, HistoryTable, InspectionId, IssueId, SiteId,
)
from firecheck.core.errors import FireCheckError, ResourceNotFoundError
from firecheck.core.records import HistoryEntry, Inspection, Issue, Site
from firecheck.core.repository_protocols import PersistenceAdapter
from firecheck.core.store_state import (
    CurrentInspectionSelected, CurrentSiteSelected, InspectionAdded,
    InspectionDeleted, InspectionUpdated, IssueAdded, IssueDeleted, IssueUpdated,
    Mutation, SiteAdded, SiteDeleted, SiteUpdated, SnapshotLoaded, StoreSnapshot,
    apply_mutation,
)
from firecheck.infrastructure.observability import entity_extra
from firecheck.schemas.payloads import (
    InspectionCreate, InspectionUpdate, IssueCreate, IssueUpdate, SiteCreate,
    SiteUpdate, validate_payload,
)
from firecheck.services.history_tracker import HistoryTracker, utcnow

logger = logging.getLogger(__name__)

Payload = Mapping[str, object] | BaseModel


class InspectionStore:
    """Async CRUD over the persistence adapter with an immutable in-memory snapshot."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        history: HistoryTracker | None = None,
        clock: Callable[[], datetime] = utcnow,
        rank: Mapping[str, int] = FACILITY_RANK,
        description_limit: int = 20,
        location_limit: int = 10,
    ):
        self._adapter = adapter
        self._clock = clock
        self._history = history or HistoryTracker(adapter, clock)
        self._rank = rank
        self._description_limit = description_limit
        self._location_limit = location_limit
        self._snapshot = StoreSnapshot()
        self._pending: set[asyncio.Task] = set()

    # --- Lifecycle -------------------------------------------------------------

    async def load(self) -> None:
        """Hydrate the snapshot (and history) from the adapter at session start."""
        site_rows = await self._adapter.list(EntityKind.SITE)
        inspection_rows = await self._adapter.list(EntityKind.INSPECTION)
        issue_rows = await self._adapter.list(EntityKind.ISSUE)

        issues_by_inspection: dict[str, list[Issue]] = {}
        for row in issue_rows:
            issue = Issue.from_row(row)
            issues_by_inspection.setdefault(issue.inspection_id, []).append(issue)

        self._apply(SnapshotLoaded(
            sites=tuple(Site.from_row(row) for row in site_rows),
            inspections=tuple(
                Inspection.from_row(
                    row, tuple(issues_by_inspection.get(str(row["id"]), ())),
                )
                for row in inspection_rows
            ),
        ))
        await self._history.load()
        logger.info(
            f"Store loaded: {len(self._snapshot.sites)} sites, "
            f"{len(self._snapshot.inspections)} inspections",
        )

    async def check_persistence(self) -> bool:
        """Readiness probe: can the adapter still answer a read?"""
        try:
            await self._adapter.list(EntityKind.SITE)
        except FireCheckError as e:
            logger.error(f"Persistence check failed: {e.message}")
            return False
        return True

    async def drain_history(self) -> None:
        """Wait for every scheduled history update (tests, shutdown)."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # --- Read API --------------------------------------------------------------

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    def list_sites(self) -> tuple[Site, ...]:
        return self._snapshot.sites

    def list_inspections(self) -> tuple[Inspection, ...]:
        return self._snapshot.inspections

    def inspections_for_site(self, site_id: SiteId) -> tuple[Inspection, ...]:
        return self._snapshot.inspections_for_site(site_id)

    def get_site(self, site_id: SiteId) -> Site:
        site = self._snapshot.find_site(site_id)
        if site is None:
            raise ResourceNotFoundError(EntityKind.SITE.value, site_id)
        return site

    def get_inspection(self, inspection_id: InspectionId) -> Inspection:
        inspection = self._snapshot.find_inspection(inspection_id)
        if inspection is None:
            raise ResourceNotFoundError(EntityKind.INSPECTION.value, inspection_id)
        return inspection

    def get_issue(self, issue_id: IssueId) -> Issue:
        issue = self._snapshot.find_issue(issue_id)
        if issue is None:
            raise ResourceNotFoundError(EntityKind.ISSUE.value, issue_id)
        return issue

    @property
    def current_site(self) -> Site | None:
        return self._snapshot.current_site

    @property
    def current_inspection(self) -> Inspection | None:
        return self._snapshot.current_inspection

    def top_issue_descriptions(self, n: int | None = None) -> list[HistoryEntry]:
        """Most frequently used descriptions (autocomplete)."""
        limit = self._description_limit if n is None else n
        return self._history.top_by_frequency(HistoryTable.DESCRIPTIONS, limit)

    def top_locations(self, n: int | None = None) -> list[HistoryEntry]:
        """Most recently used locations (autocomplete)."""
        limit = self._location_limit if n is None else n
        return self._history.top_by_recency(HistoryTable.LOCATIONS, limit)

    def report_for(self, inspection_id: InspectionId) -> Report:
        inspection = self.get_inspection(inspection_id)
        return build_report(
            inspection, self._snapshot.find_site(inspection.site_id), self._rank,
        )

    # --- Sites -----------------------------------------------------------------

    async def create_site(self, data: Payload) -> Site:
        payload = validate_payload(SiteCreate, data)
        record = {**payload.to_record(), "created_at": self._clock()}
        row = await self._persist(
            "insert", EntityKind.SITE, None,
            self._adapter.insert(EntityKind.SITE, record),
        )
        site = Site.from_row(row)
        self._apply(SiteAdded(site))
        logger.info(f"Created site {site.id}", extra=entity_extra(EntityKind.SITE, site.id))
        return site

    async def update_site(self, site_id: SiteId, data: Payload) -> Site:
        payload = validate_payload(SiteUpdate, data)
        existing = self.get_site(site_id)
        patch = payload.to_record()
        if not patch:
            return existing
        row = await self._persist(
            "update", EntityKind.SITE, site_id,
            self._adapter.update(EntityKind.SITE, site_id, patch),
        )
        site = Site.from_row(row)
        self._apply(SiteUpdated(site))
        logger.info(f"Updated site {site_id}", extra=entity_extra(EntityKind.SITE, site_id))
        return site

    async def delete_site(self, site_id: SiteId) -> None:
        """Delete a site with all its inspections and their issues."""
        self.get_site(site_id)
        await self._persist(
            "remove", EntityKind.SITE, site_id,
            self._adapter.remove(EntityKind.SITE, site_id),
        )
        self._apply(SiteDeleted(site_id))
        logger.info(f"Deleted site {site_id}", extra=entity_extra(EntityKind.SITE, site_id))

    # --- Inspections -----------------------------------------------------------

    async def create_inspection(self, data: Payload) -> Inspection:
        """Create an inspection at an existing site; it becomes the current one."""
        payload = validate_payload(InspectionCreate, data)
        self.get_site(SiteId(payload.site_id))
        record = {**payload.to_record(), "created_at": self._clock()}
        row = await self._persist(
            "insert", EntityKind.INSPECTION, None,
            self._adapter.insert(EntityKind.INSPECTION, record),
        )
        inspection = Inspection.from_row(row)
        self._apply(InspectionAdded(inspection))
        logger.info(
            f"Created inspection {inspection.id} for site {inspection.site_id}",
            extra=entity_extra(EntityKind.INSPECTION, inspection.id),
        )
        return self.get_inspection(inspection.id)

    async def update_inspection(
        self, inspection_id: InspectionId, data: Payload,
    ) -> Inspection:
        payload = validate_payload(InspectionUpdate, data)
        existing = self.get_inspection(inspection_id)
        patch = payload.to_record()
        if not patch:
            return existing
        row = await self._persist(
            "update", EntityKind.INSPECTION, inspection_id,
            self._adapter.update(EntityKind.INSPECTION, inspection_id, patch),
        )
        self._apply(InspectionUpdated(Inspection.from_row(row)))
        logger.info(
            f"Updated inspection {inspection_id}",
            extra=entity_extra(EntityKind.INSPECTION, inspection_id),
        )
        return self.get_inspection(inspection_id)

    async def delete_inspection(self, inspection_id: InspectionId) -> None:
        """Delete an inspection with all its issues."""
        self.get_inspection(inspection_id)
        await self._persist(
            "remove", EntityKind.INSPECTION, inspection_id,
            self._adapter.remove(EntityKind.INSPECTION, inspection_id),
        )
        self._apply(InspectionDeleted(inspection_id))
        logger.info(
            f"Deleted inspection {inspection_id}",
            extra=entity_extra(EntityKind.INSPECTION, inspection_id),
        )

    # --- Issues ----------------------------------------------------------------

    async def add_issue(self, inspection_id: InspectionId, data: Payload) -> Issue:
        payload = validate_payload(IssueCreate, data)
        self.get_inspection(inspection_id)
        record = {
            **payload.to_record(),
            "inspection_id": inspection_id,
            "created_at": self._clock(),
        }
        row = await self._persist(
            "insert", EntityKind.ISSUE, None,
            self._adapter.insert(EntityKind.ISSUE, record),
        )
        issue = Issue.from_row(row)
        self._apply(IssueAdded(issue))
        self._track_history(issue)
        logger.info(
            f"Added issue {issue.id} to inspection {inspection_id}",
            extra=entity_extra(EntityKind.ISSUE, issue.id),
        )
        return issue

    async def update_issue(self, issue_id: IssueId, data: Payload) -> Issue:
        payload = validate_payload(IssueUpdate, data)
        existing = self.get_issue(issue_id)
        patch = payload.to_record()
        if not patch:
            return existing
        row = await self._persist(
            "update", EntityKind.ISSUE, issue_id,
            self._adapter.update(EntityKind.ISSUE, issue_id, patch),
        )
        issue = Issue.from_row(row)
        self._apply(IssueUpdated(issue))
        self._track_history(issue)
        logger.info(f"Updated issue {issue_id}", extra=entity_extra(EntityKind.ISSUE, issue_id))
        return issue

    async def delete_issue(self, issue_id: IssueId) -> None:
        existing = self.get_issue(issue_id)
        await self._persist(
            "remove", EntityKind.ISSUE, issue_id,
            self._adapter.remove(EntityKind.ISSUE, issue_id),
        )
        self._apply(IssueDeleted(existing.inspection_id, issue_id))
        logger.info(f"Deleted issue {issue_id}", extra=entity_extra(EntityKind.ISSUE, issue_id))

    # --- Selection -------------------------------------------------------------

    def set_current_site(self, site_id: SiteId | None) -> Site | None:
        if site_id is not None:
            self.get_site(site_id)
        self._apply(CurrentSiteSelected(site_id))
        return self.current_site

    def set_current_inspection(
        self, inspection_id: InspectionId | None,
    ) -> Inspection | None:
        if inspection_id is not None:
            self.get_inspection(inspection_id)
        self._apply(CurrentInspectionSelected(inspection_id))
        return self.current_inspection

    # --- Internals -------------------------------------------------------------

    def _apply(self, mutation: Mutation) -> None:
        self._snapshot = apply_mutation(self._snapshot, mutation)

    async def _persist(self, operation, kind: EntityKind, entity_id, call):
        """Await one adapter call; log failures, re-raise them unchanged."""
        try:
            return await call
        except FireCheckError as e:
            logger.error(
                f"{operation} {kind.value} failed: {e.message}",
                extra=entity_extra(
                    kind, entity_id, error_code=e.code, operation=operation,
                ),
            )
            raise

    def _track_history(self, issue: Issue) -> None:
        for table, text in (
            (HistoryTable.DESCRIPTIONS, issue.description),
            (HistoryTable.LOCATIONS, issue.location),
        ):
            task = asyncio.create_task(self._history.record_use(table, text))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
