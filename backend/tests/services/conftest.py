"""Service test fixtures — in-memory adapter with call recording and fault injection.

Invariants:
    - Every test gets a fresh, memory-only JsonFilePersistenceAdapter
    - RecordingAdapter forwards to it, logging (operation, kind) for each call
    - fail_on lets a test make one operation/kind pair raise PersistenceUnavailableError
"""

import pytest

from firecheck.core.domain_types import EntityKind
from firecheck.core.errors import PersistenceUnavailableError
from firecheck.infrastructure.local_adapter import JsonFilePersistenceAdapter
from firecheck.services.history_tracker import HistoryTracker
from firecheck.services.inspection_store import InspectionStore


class RecordingAdapter:
    """PersistenceAdapter double: real in-memory behaviour plus call log and faults."""

    def __init__(self, inner=None):
        self.inner = inner or JsonFilePersistenceAdapter()
        self.calls: list[tuple[str, EntityKind]] = []
        self.failures: set[tuple[str, EntityKind]] = set()

    def fail_on(self, operation: str, kind: EntityKind) -> None:
        self.failures.add((operation, kind))

    def _check(self, operation: str, kind: EntityKind) -> None:
        self.calls.append((operation, kind))
        if (operation, kind) in self.failures:
            raise PersistenceUnavailableError("injected failure", operation)

    async def list(self, kind):
        self._check("list", kind)
        return await self.inner.list(kind)

    async def insert(self, kind, record):
        self._check("insert", kind)
        return await self.inner.insert(kind, record)

    async def update(self, kind, record_id, patch):
        self._check("update", kind)
        return await self.inner.update(kind, record_id, patch)

    async def remove(self, kind, record_id):
        self._check("remove", kind)
        return await self.inner.remove(kind, record_id)


@pytest.fixture
def adapter():
    return RecordingAdapter()


@pytest.fixture
async def store(adapter, clock):
    store = InspectionStore(adapter, HistoryTracker(adapter, clock), clock=clock)
    await store.load()
    yield store
    await store.drain_history()


@pytest.fixture
async def site(store):
    return await store.create_site({"name": "Riverside Tower", "address": "12 River Rd"})


@pytest.fixture
async def inspection(store, site):
    return await store.create_inspection({
        "site_id": site.id, "inspector": "Kim", "inspection_type": "작동점검",
    })
