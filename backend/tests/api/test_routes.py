"""Route tests — HTTP surface over the inspection store.

Tests cover:
    - Site and inspection CRUD with status codes
    - Issue routes scoped to their inspection
    - Report payload shape
    - Error envelope for validation, not-found and persistence failures
    - History, selection and health endpoints
"""

from firecheck.core.errors import PersistenceUnavailableError


# --- Sites --------------------------------------------------------------------

async def test_create_and_list_sites(client, site_id):
    resp = await client.get("/api/v1/sites")
    assert resp.status_code == 200
    sites = resp.json()["sites"]
    assert [s["id"] for s in sites] == [site_id]
    assert sites[0]["name"] == "Riverside Tower"


async def test_create_site_returns_201(client):
    resp = await client.post("/api/v1/sites", json={"name": "A", "address": "B"})
    assert resp.status_code == 201
    assert resp.json()["created_at"]


async def test_create_site_missing_name_is_400(client):
    resp = await client.post("/api/v1/sites", json={"address": "12 River Rd"})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "body.name"


async def test_patch_site(client, site_id):
    resp = await client.patch(f"/api/v1/sites/{site_id}", json={"phone": "010"})
    assert resp.status_code == 200
    assert resp.json()["phone"] == "010"
    assert resp.json()["name"] == "Riverside Tower"


async def test_unknown_site_is_404(client):
    resp = await client.get("/api/v1/sites/missing")
    assert resp.status_code == 404
    body = resp.json()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["context"]["entity_id"] == "missing"


async def test_delete_site_cascades(client, site_id, inspection_id):
    resp = await client.delete(f"/api/v1/sites/{site_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/inspections/{inspection_id}")).status_code == 404
    assert (await client.get("/api/v1/inspections")).json() == {"inspections": []}


async def test_site_inspections(client, site_id, inspection_id):
    resp = await client.get(f"/api/v1/sites/{site_id}/inspections")
    assert [i["id"] for i in resp.json()["inspections"]] == [inspection_id]
    assert (await client.get("/api/v1/sites/missing/inspections")).status_code == 404


# --- Inspections & issues -----------------------------------------------------

async def test_inspection_for_missing_site_is_404(client):
    resp = await client.post("/api/v1/inspections", json={
        "site_id": "missing", "inspector": "Kim",
    })
    assert resp.status_code == 404


async def test_invalid_inspection_type_is_400(client, site_id):
    resp = await client.post("/api/v1/inspections", json={
        "site_id": site_id, "inspector": "Kim", "inspection_type": "정밀점검",
    })
    assert resp.status_code == 400


async def test_issue_lifecycle(client, inspection_id):
    base = f"/api/v1/inspections/{inspection_id}/issues"
    created = await client.post(base, json={
        "facility_type": "경보설비", "description": "감지기 오작동", "location": "2F",
    })
    assert created.status_code == 201
    issue_id = created.json()["id"]

    patched = await client.patch(f"{base}/{issue_id}", json={"detail_location": "계단실"})
    assert patched.json()["detail_location"] == "계단실"

    inspection = (await client.get(f"/api/v1/inspections/{inspection_id}")).json()
    assert [i["id"] for i in inspection["issues"]] == [issue_id]

    assert (await client.delete(f"{base}/{issue_id}")).status_code == 204
    inspection = (await client.get(f"/api/v1/inspections/{inspection_id}")).json()
    assert inspection["issues"] == []


async def test_issue_of_other_inspection_is_404(client, site_id, inspection_id):
    other = (await client.post("/api/v1/inspections", json={
        "site_id": site_id, "inspector": "Lee",
    })).json()["id"]
    issue_id = (await client.post(
        f"/api/v1/inspections/{other}/issues",
        json={"description": "A", "location": "1F"},
    )).json()["id"]
    resp = await client.delete(f"/api/v1/inspections/{inspection_id}/issues/{issue_id}")
    assert resp.status_code == 404


async def test_report(client, inspection_id):
    base = f"/api/v1/inspections/{inspection_id}/issues"
    for facility, description, location, detail in [
        ("소화설비", "호스 손상", "1F", ""),
        ("소화설비", "호스 손상", "1F", "계단실"),
        ("경보설비", "감지기 오작동", "2F", ""),
    ]:
        await client.post(base, json={
            "facility_type": facility, "description": description,
            "location": location, "detail_location": detail,
        })

    report = (await client.get(f"/api/v1/inspections/{inspection_id}/report")).json()

    assert report["site_name"] == "Riverside Tower"
    assert report["total_issues"] == 3
    assert [s["facility_type"] for s in report["sections"]] == ["소화설비", "경보설비"]
    hose = report["sections"][0]["groups"][0]
    assert hose["detail_locations"] == ["계단실"]
    assert len(hose["issues"]) == 2


async def test_persistence_failure_is_503(client, api_store, site_id, monkeypatch):
    async def boom(kind, record_id, patch):
        raise PersistenceUnavailableError("disk full", "update")

    monkeypatch.setattr(api_store._adapter, "update", boom)
    resp = await client.patch(f"/api/v1/sites/{site_id}", json={"name": "X"})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "PERSISTENCE_UNAVAILABLE"
    assert api_store.get_site(site_id).name == "Riverside Tower"


# --- History, selection, health -----------------------------------------------

async def test_history_suggestions(client, api_store, inspection_id):
    base = f"/api/v1/inspections/{inspection_id}/issues"
    for description in ("A", "B", "A"):
        await client.post(base, json={"description": description, "location": "1F"})
    await api_store.drain_history()

    descriptions = (await client.get("/api/v1/history/descriptions?limit=1")).json()
    assert [(e["text"], e["count"]) for e in descriptions["entries"]] == [("A", 2)]
    locations = (await client.get("/api/v1/history/locations")).json()
    assert [e["text"] for e in locations["entries"]] == ["1F"]


async def test_selection(client, site_id, inspection_id):
    current = (await client.get("/api/v1/selection")).json()
    assert current["current_site"] is None
    assert current["current_inspection"]["id"] == inspection_id

    resp = await client.put("/api/v1/selection", json={"site_id": site_id})
    assert resp.json()["current_site"]["id"] == site_id

    resp = await client.put("/api/v1/selection", json={"inspection_id": "missing"})
    assert resp.status_code == 404

    resp = await client.put("/api/v1/selection", json={"inspection_id": None})
    assert resp.json()["current_inspection"] is None
    assert resp.json()["current_site"]["id"] == site_id


async def test_health(client):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_readiness(client, api_store, monkeypatch):
    assert (await client.get("/api/v1/health/ready")).status_code == 200

    async def boom(kind):
        raise PersistenceUnavailableError("gone", "list")

    monkeypatch.setattr(api_store._adapter, "list", boom)
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 503
    assert resp.json()["reason"] == "persistence_unavailable"
