"""API test fixtures — FastAPI test client over an in-memory store.

Invariants:
    - Every test gets a fresh store on a memory-only JsonFilePersistenceAdapter
    - get_store dependency overridden; the app lifespan is never entered
"""

import pytest
from httpx import ASGITransport, AsyncClient

from firecheck.api.dependencies import get_store
from firecheck.infrastructure.local_adapter import JsonFilePersistenceAdapter
from firecheck.main import app
from firecheck.services.inspection_store import InspectionStore


@pytest.fixture
async def api_store(clock):
    store = InspectionStore(JsonFilePersistenceAdapter(), clock=clock)
    await store.load()
    yield store
    await store.drain_history()


@pytest.fixture
async def client(api_store):
    """FastAPI test client with the store dependency overridden."""
    app.dependency_overrides[get_store] = lambda: api_store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def site_id(client):
    resp = await client.post(
        "/api/v1/sites", json={"name": "Riverside Tower", "address": "12 River Rd"},
    )
    return resp.json()["id"]


@pytest.fixture
async def inspection_id(client, site_id):
    resp = await client.post("/api/v1/inspections", json={
        "site_id": site_id, "inspector": "Kim", "inspection_type": "작동점검",
    })
    return resp.json()["id"]
