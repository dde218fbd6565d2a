"""InspectionStore tests — write path, read API and failure semantics.

Tests cover:
    - Snapshot mirrors the adapter after any sequence of site writes
    - Cascade delete leaves no orphans in the snapshot or the adapter
    - Validation and reference errors never reach the adapter
    - Adapter errors propagate and leave the snapshot object untouched
    - The Riverside Tower walkthrough end to end
"""

import asyncio

import pytest

from firecheck.core.domain_types import EntityKind
from firecheck.core.errors import (
    PersistenceUnavailableError, ResourceNotFoundError, ValidationError,
)
from firecheck.core.records import Site
from firecheck.services.inspection_store import InspectionStore
from firecheck.infrastructure.local_adapter import JsonFilePersistenceAdapter


def _writes(adapter) -> list:
    return [c for c in adapter.calls if c[0] != "list"]


# --- Sites --------------------------------------------------------------------

async def test_site_list_mirrors_adapter_after_mixed_writes(store, adapter):
    a = await store.create_site({"name": "A", "address": "1"})
    b = await store.create_site({"name": "B", "address": "2"})
    c = await store.create_site({"name": "C", "address": "3"})
    await store.update_site(b.id, {"name": "B2", "phone": "010"})
    await store.delete_site(a.id)
    await store.create_site({"name": "D", "address": "4"})
    await store.update_site(c.id, {"notes": "메모"})

    persisted = [Site.from_row(r) for r in await adapter.list(EntityKind.SITE)]
    assert list(store.list_sites()) == persisted
    assert [s.name for s in store.list_sites()] == ["D", "C", "B2"]


async def test_create_site_assigns_id_and_timestamp(store, clock):
    site = await store.create_site({"name": "A", "address": "1"})
    assert site.id
    assert site.created_at == clock.now
    assert store.get_site(site.id) is site


async def test_update_site_keeps_untouched_fields(store, site):
    updated = await store.update_site(site.id, {"manager_name": "Park"})
    assert updated.manager_name == "Park"
    assert updated.name == "Riverside Tower"
    assert updated.created_at == site.created_at


async def test_empty_patch_skips_adapter(store, adapter, site):
    before = len(adapter.calls)
    assert await store.update_site(site.id, {"unknown": 1}) == site
    assert len(adapter.calls) == before


async def test_delete_site_cascades(store, adapter, site):
    first = await store.create_inspection({"site_id": site.id, "inspector": "Kim"})
    second = await store.create_inspection({"site_id": site.id, "inspector": "Lee"})
    for n in range(3):
        await store.add_issue(first.id, {"description": f"D{n}", "location": "1F"})
    await store.add_issue(second.id, {"description": "D", "location": "2F"})
    removed = {first.id, second.id}

    await store.delete_site(site.id)

    assert store.inspections_for_site(site.id) == ()
    assert all(i.site_id != site.id for i in store.list_inspections())
    assert await adapter.list(EntityKind.INSPECTION) == []
    issue_rows = await adapter.list(EntityKind.ISSUE)
    assert not [r for r in issue_rows if r["inspection_id"] in removed]
    assert _writes(adapter).count(("remove", EntityKind.SITE)) == 1


async def test_delete_selected_site_clears_selection(store, site, inspection):
    store.set_current_site(site.id)
    await store.delete_site(site.id)
    assert store.current_site is None
    assert store.current_inspection is None


# --- Inspections --------------------------------------------------------------

async def test_create_inspection_becomes_current(store, inspection):
    assert store.current_inspection == inspection
    assert inspection.issues == ()


async def test_create_inspection_for_missing_site_never_persists(store, adapter):
    before = list(adapter.calls)
    with pytest.raises(ResourceNotFoundError):
        await store.create_inspection({"site_id": "nope", "inspector": "Kim"})
    assert adapter.calls == before


async def test_update_inspection_keeps_issues(store, inspection):
    await store.add_issue(inspection.id, {"description": "A", "location": "1F"})
    updated = await store.update_inspection(
        inspection.id, {"inspection_type": "종합점검", "notes": "재점검"},
    )
    assert updated.inspection_type == "종합점검"
    assert len(updated.issues) == 1


async def test_delete_inspection_removes_issues(store, adapter, inspection):
    issue = await store.add_issue(inspection.id, {"description": "A", "location": "1F"})
    await store.delete_inspection(inspection.id)
    with pytest.raises(ResourceNotFoundError):
        store.get_issue(issue.id)
    assert await adapter.list(EntityKind.ISSUE) == []
    assert store.current_inspection is None


# --- Issues -------------------------------------------------------------------

async def test_issues_kept_in_insertion_order(store, inspection):
    ids = [
        (await store.add_issue(inspection.id, {"description": d, "location": "1F"})).id
        for d in ("A", "B", "C")
    ]
    assert [i.id for i in store.get_inspection(inspection.id).issues] == ids


async def test_update_and_delete_issue(store, inspection):
    issue = await store.add_issue(inspection.id, {"description": "A", "location": "1F"})
    updated = await store.update_issue(issue.id, {"detail_location": "계단실"})
    assert updated.detail_location == "계단실"
    assert store.get_issue(issue.id) == updated
    await store.delete_issue(issue.id)
    assert store.get_inspection(inspection.id).issues == ()


async def test_add_issue_to_missing_inspection(store, adapter):
    with pytest.raises(ResourceNotFoundError):
        await store.add_issue("nope", {"description": "A", "location": "1F"})
    assert _writes(adapter) == []


# --- Failure semantics --------------------------------------------------------

@pytest.mark.parametrize("data", [
    {"address": "12 River Rd"},
    {"name": " ", "address": "12 River Rd"},
    {"name": "A"},
])
async def test_invalid_site_makes_no_adapter_call(store, adapter, data):
    before = store.snapshot
    calls = list(adapter.calls)
    with pytest.raises(ValidationError):
        await store.create_site(data)
    assert adapter.calls == calls
    assert store.snapshot is before


async def test_invalid_issue_makes_no_adapter_call(store, adapter, inspection):
    calls = list(adapter.calls)
    with pytest.raises(ValidationError):
        await store.add_issue(inspection.id, {"facility_type": "전기", "description": "A", "location": "1F"})
    assert adapter.calls == calls


@pytest.mark.parametrize("operation, kind, write", [
    ("insert", EntityKind.SITE, lambda s, ids: s.create_site({"name": "X", "address": "Y"})),
    ("update", EntityKind.SITE, lambda s, ids: s.update_site(ids["site"], {"name": "Z"})),
    ("remove", EntityKind.SITE, lambda s, ids: s.delete_site(ids["site"])),
    ("update", EntityKind.INSPECTION, lambda s, ids: s.update_inspection(ids["inspection"], {"notes": "n"})),
    ("remove", EntityKind.INSPECTION, lambda s, ids: s.delete_inspection(ids["inspection"])),
    ("insert", EntityKind.ISSUE, lambda s, ids: s.add_issue(ids["inspection"], {"description": "A", "location": "1F"})),
])
async def test_adapter_failure_propagates_without_snapshot_change(
    store, adapter, inspection, operation, kind, write,
):
    ids = {"site": inspection.site_id, "inspection": inspection.id}
    adapter.fail_on(operation, kind)
    before = store.snapshot
    with pytest.raises(PersistenceUnavailableError):
        await write(store, ids)
    assert store.snapshot is before


async def test_successful_write_swaps_snapshot(store, site):
    before = store.snapshot
    await store.update_site(site.id, {"notes": "메모"})
    assert store.snapshot is not before


# --- Read API -----------------------------------------------------------------

async def test_get_missing_entities_raise_not_found(store):
    with pytest.raises(ResourceNotFoundError):
        store.get_site("nope")
    with pytest.raises(ResourceNotFoundError):
        store.get_inspection("nope")
    with pytest.raises(ResourceNotFoundError):
        store.report_for("nope")


async def test_selection(store, site, inspection):
    assert store.set_current_site(site.id) == site
    assert store.set_current_inspection(None) is None
    with pytest.raises(ResourceNotFoundError):
        store.set_current_site("nope")
    assert store.current_site == site


async def test_check_persistence(store, adapter):
    assert await store.check_persistence()
    adapter.fail_on("list", EntityKind.SITE)
    assert not await store.check_persistence()


# --- Walkthrough --------------------------------------------------------------

async def test_riverside_tower_report(store):
    site = await store.create_site({"name": "Riverside Tower", "address": "12 River Rd"})
    inspection = await store.create_inspection({
        "site_id": site.id, "inspector": "Kim", "inspection_type": "작동점검",
    })
    for facility, description, location, detail in [
        ("소화설비", "호스 손상", "1F", ""),
        ("소화설비", "호스 손상", "1F", "계단실"),
        ("경보설비", "감지기 오작동", "2F", ""),
    ]:
        await store.add_issue(inspection.id, {
            "facility_type": facility, "description": description,
            "location": location, "detail_location": detail,
        })

    report = store.report_for(inspection.id)

    assert report.site_name == "Riverside Tower"
    assert [s.facility_type for s in report.sections] == ["소화설비", "경보설비"]
    (hose,) = report.sections[0].groups
    assert len(hose.issues) == 2
    assert hose.detail_locations == ("계단실",)
    assert report.sections[1].groups[0].detail_locations == ()


# --- Persistence across sessions ----------------------------------------------

async def test_reload_from_file_restores_snapshot(tmp_path, clock):
    path = tmp_path / "firecheck.json"
    first = InspectionStore(JsonFilePersistenceAdapter(path), clock=clock)
    await first.load()
    site = await first.create_site({"name": "A", "address": "1"})
    inspection = await first.create_inspection({"site_id": site.id, "inspector": "Kim"})
    await first.add_issue(inspection.id, {"description": "호스 손상", "location": "1F"})
    await first.drain_history()

    second = InspectionStore(JsonFilePersistenceAdapter(path), clock=clock)
    await second.load()

    assert second.list_sites() == first.list_sites()
    assert second.list_inspections() == first.list_inspections()
    assert [e.text for e in second.top_issue_descriptions()] == ["호스 손상"]
    assert second.current_inspection is None


# --- Overlapping writes -------------------------------------------------------

def _delay_first_insert(adapter, kind: EntityKind, monkeypatch) -> None:
    """First insert of `kind` finishes after any insert started later."""
    original = adapter.insert
    delayed = []

    async def insert(insert_kind, record):
        if insert_kind == kind and not delayed:
            delayed.append(record)
            await asyncio.sleep(0.05)
        return await original(insert_kind, record)

    monkeypatch.setattr(adapter, "insert", insert)


async def test_overlapping_site_creates_match_adapter_order(store, adapter, monkeypatch):
    _delay_first_insert(adapter, EntityKind.SITE, monkeypatch)
    await asyncio.gather(
        store.create_site({"name": "A", "address": "1"}),
        store.create_site({"name": "B", "address": "2"}),
    )
    persisted = [Site.from_row(r) for r in await adapter.list(EntityKind.SITE)]
    assert list(store.list_sites()) == persisted
    assert [s.name for s in store.list_sites()] == ["B", "A"]


async def test_overlapping_issue_creates_match_reloaded_order(
    store, adapter, inspection, clock, monkeypatch,
):
    _delay_first_insert(adapter, EntityKind.ISSUE, monkeypatch)
    await asyncio.gather(
        store.add_issue(inspection.id, {"description": "first", "location": "1F"}),
        store.add_issue(inspection.id, {"description": "second", "location": "1F"}),
    )
    await store.drain_history()

    reloaded = InspectionStore(adapter, clock=clock)
    await reloaded.load()
    expected = [i.description for i in store.get_inspection(inspection.id).issues]
    assert expected == ["first", "second"]
    assert [
        i.description for i in reloaded.get_inspection(inspection.id).issues
    ] == expected
