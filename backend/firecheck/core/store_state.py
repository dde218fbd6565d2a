"""Store State — immutable entity snapshot and the pure state transition function.

Invariants:
    - StoreSnapshot is frozen; apply_mutation always returns a NEW snapshot or the
      same object when nothing changed — never mutates its input
    - Collections untouched by a mutation keep their identity (observers compare by `is`)
    - Sites and inspections are newest first; issues inside an inspection oldest first.
      Additions are placed by created_at, not by arrival, so overlapping writes that
      finish out of order still match the adapter's list order
    - After SiteDeleted no inspection references the site; after InspectionDeleted
      no issue survives with its id (cascade applied in ONE transition)
    - current_site_id / current_inspection_id always point at a live entity or None

Design Decisions:
    - Mutation intents as frozen dataclasses, dispatched through an explicit
      type -> handler dict (no isinstance ladders, every transition visible in one place)
    - Selection stored as ids, resolved on read: an update to the selected entity
      is visible through current_site without a second write
    - apply_mutation never raises for a missing target: existence is checked by the
      store before persistence, a stale intent is a no-op
"""

from dataclasses import dataclass, replace
from typing import Callable

from firecheck.core.domain_types import SiteId, InspectionId, IssueId
from firecheck.core.records import Site, Inspection, Issue


@dataclass(frozen=True)
class StoreSnapshot:
    """One immutable view of every entity held by a running session."""
    sites: tuple[Site, ...] = ()
    inspections: tuple[Inspection, ...] = ()
    current_site_id: SiteId | None = None
    current_inspection_id: InspectionId | None = None

    # --- Read helpers (pure) ---------------------------------------------------

    def find_site(self, site_id: SiteId) -> Site | None:
        return next((s for s in self.sites if s.id == site_id), None)

    def find_inspection(self, inspection_id: InspectionId) -> Inspection | None:
        return next((i for i in self.inspections if i.id == inspection_id), None)

    def find_issue(self, issue_id: IssueId) -> Issue | None:
        for inspection in self.inspections:
            for issue in inspection.issues:
                if issue.id == issue_id:
                    return issue
        return None

    def inspections_for_site(self, site_id: SiteId) -> tuple[Inspection, ...]:
        return tuple(i for i in self.inspections if i.site_id == site_id)

    @property
    def current_site(self) -> Site | None:
        if self.current_site_id is None:
            return None
        return self.find_site(self.current_site_id)

    @property
    def current_inspection(self) -> Inspection | None:
        if self.current_inspection_id is None:
            return None
        return self.find_inspection(self.current_inspection_id)


# ─── Mutation Intents ────────────────────────────────────────────

@dataclass(frozen=True)
class SnapshotLoaded:
    sites: tuple[Site, ...]
    inspections: tuple[Inspection, ...]


@dataclass(frozen=True)
class SiteAdded:
    site: Site


@dataclass(frozen=True)
class SiteUpdated:
    site: Site


@dataclass(frozen=True)
class SiteDeleted:
    site_id: SiteId


@dataclass(frozen=True)
class InspectionAdded:
    inspection: Inspection


@dataclass(frozen=True)
class InspectionUpdated:
    inspection: Inspection


@dataclass(frozen=True)
class InspectionDeleted:
    inspection_id: InspectionId


@dataclass(frozen=True)
class IssueAdded:
    issue: Issue


@dataclass(frozen=True)
class IssueUpdated:
    issue: Issue


@dataclass(frozen=True)
class IssueDeleted:
    inspection_id: InspectionId
    issue_id: IssueId


@dataclass(frozen=True)
class CurrentSiteSelected:
    site_id: SiteId | None


@dataclass(frozen=True)
class CurrentInspectionSelected:
    inspection_id: InspectionId | None


Mutation = (
    SnapshotLoaded | SiteAdded | SiteUpdated | SiteDeleted
    | InspectionAdded | InspectionUpdated | InspectionDeleted
    | IssueAdded | IssueUpdated | IssueDeleted
    | CurrentSiteSelected | CurrentInspectionSelected
)


# ─── Transitions ─────────────────────────────────────────────────

def _loaded(state: StoreSnapshot, m: SnapshotLoaded) -> StoreSnapshot:
    site_ids = {s.id for s in m.sites}
    inspections = tuple(i for i in m.inspections if i.site_id in site_ids)
    return StoreSnapshot(sites=m.sites, inspections=inspections)


def _site_added(state: StoreSnapshot, m: SiteAdded) -> StoreSnapshot:
    return replace(state, sites=_insert_newest_first(state.sites, m.site))


def _site_updated(state: StoreSnapshot, m: SiteUpdated) -> StoreSnapshot:
    if state.find_site(m.site.id) is None:
        return state
    sites = tuple(m.site if s.id == m.site.id else s for s in state.sites)
    return replace(state, sites=sites)


def _site_deleted(state: StoreSnapshot, m: SiteDeleted) -> StoreSnapshot:
    if state.find_site(m.site_id) is None:
        return state
    removed = {i.id for i in state.inspections if i.site_id == m.site_id}
    inspections = state.inspections
    if removed:
        inspections = tuple(i for i in inspections if i.id not in removed)
    return replace(
        state,
        sites=tuple(s for s in state.sites if s.id != m.site_id),
        inspections=inspections,
        current_site_id=(
            None if state.current_site_id == m.site_id else state.current_site_id
        ),
        current_inspection_id=(
            None if state.current_inspection_id in removed
            else state.current_inspection_id
        ),
    )


def _inspection_added(state: StoreSnapshot, m: InspectionAdded) -> StoreSnapshot:
    if state.find_site(m.inspection.site_id) is None:
        return state
    return replace(
        state,
        inspections=_insert_newest_first(state.inspections, m.inspection),
        current_inspection_id=m.inspection.id,
    )


def _inspection_updated(state: StoreSnapshot, m: InspectionUpdated) -> StoreSnapshot:
    existing = state.find_inspection(m.inspection.id)
    if existing is None:
        return state
    # Issues are owned by the snapshot, not by the adapter's inspection row
    updated = m.inspection.with_issues(existing.issues)
    return _replace_inspection(state, updated)


def _inspection_deleted(state: StoreSnapshot, m: InspectionDeleted) -> StoreSnapshot:
    if state.find_inspection(m.inspection_id) is None:
        return state
    return replace(
        state,
        inspections=tuple(i for i in state.inspections if i.id != m.inspection_id),
        current_inspection_id=(
            None if state.current_inspection_id == m.inspection_id
            else state.current_inspection_id
        ),
    )


def _issue_added(state: StoreSnapshot, m: IssueAdded) -> StoreSnapshot:
    owner = state.find_inspection(m.issue.inspection_id)
    if owner is None:
        return state
    return _replace_inspection(
        state, owner.with_issues(_insert_oldest_first(owner.issues, m.issue)),
    )


def _issue_updated(state: StoreSnapshot, m: IssueUpdated) -> StoreSnapshot:
    owner = state.find_inspection(m.issue.inspection_id)
    if owner is None or not any(i.id == m.issue.id for i in owner.issues):
        return state
    issues = tuple(m.issue if i.id == m.issue.id else i for i in owner.issues)
    return _replace_inspection(state, owner.with_issues(issues))


def _issue_deleted(state: StoreSnapshot, m: IssueDeleted) -> StoreSnapshot:
    owner = state.find_inspection(m.inspection_id)
    if owner is None or not any(i.id == m.issue_id for i in owner.issues):
        return state
    issues = tuple(i for i in owner.issues if i.id != m.issue_id)
    return _replace_inspection(state, owner.with_issues(issues))


def _site_selected(state: StoreSnapshot, m: CurrentSiteSelected) -> StoreSnapshot:
    if m.site_id is not None and state.find_site(m.site_id) is None:
        return state
    if state.current_site_id == m.site_id:
        return state
    return replace(state, current_site_id=m.site_id)


def _inspection_selected(
    state: StoreSnapshot, m: CurrentInspectionSelected,
) -> StoreSnapshot:
    if m.inspection_id is not None and state.find_inspection(m.inspection_id) is None:
        return state
    if state.current_inspection_id == m.inspection_id:
        return state
    return replace(state, current_inspection_id=m.inspection_id)


def _insert_newest_first(records: tuple, record) -> tuple:
    """Place `record` ahead of every record not newer than it (later insert wins ties)."""
    for index, existing in enumerate(records):
        if existing.created_at <= record.created_at:
            return records[:index] + (record,) + records[index:]
    return records + (record,)


def _insert_oldest_first(records: tuple, record) -> tuple:
    """Place `record` after every record not newer than it (later insert wins ties)."""
    for index, existing in enumerate(records):
        if existing.created_at > record.created_at:
            return records[:index] + (record,) + records[index:]
    return records + (record,)


def _replace_inspection(state: StoreSnapshot, updated: Inspection) -> StoreSnapshot:
    inspections = tuple(
        updated if i.id == updated.id else i for i in state.inspections
    )
    return replace(state, inspections=inspections)


# Adding an intent requires an entry here
_TRANSITIONS: dict[type, Callable[[StoreSnapshot, object], StoreSnapshot]] = {
    SnapshotLoaded: _loaded,
    SiteAdded: _site_added,
    SiteUpdated: _site_updated,
    SiteDeleted: _site_deleted,
    InspectionAdded: _inspection_added,
    InspectionUpdated: _inspection_updated,
    InspectionDeleted: _inspection_deleted,
    IssueAdded: _issue_added,
    IssueUpdated: _issue_updated,
    IssueDeleted: _issue_deleted,
    CurrentSiteSelected: _site_selected,
    CurrentInspectionSelected: _inspection_selected,
}


def apply_mutation(state: StoreSnapshot, mutation: Mutation) -> StoreSnapshot:
    """Apply one mutation intent. Pure — returns a new snapshot, input untouched."""
    handler = _TRANSITIONS.get(type(mutation))
    if handler is None:
        raise TypeError(f"Unknown mutation intent: {type(mutation).__name__}")
    return handler(state, mutation)
