"""Composition Root — builds one store session from settings and tears it down.

Invariants:
    - persistence_backend is read here and nowhere else
    - open_store yields a loaded InspectionStore; on exit pending history writes are
      awaited and the database engine (if any) disposed
    - One store per session: nothing is cached at module level

Design Decisions:
    - asynccontextmanager over a global singleton: the API lifespan, scripts and tests
      all get a store with a clear start and end
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from firecheck.config import Settings, get_settings
from firecheck.core.repository_protocols import PersistenceAdapter
from firecheck.infrastructure.database import DatabaseSessionManager
from firecheck.infrastructure.local_adapter import JsonFilePersistenceAdapter
from firecheck.infrastructure.sql_adapter import SqlPersistenceAdapter
from firecheck.services.inspection_store import InspectionStore

logger = logging.getLogger(__name__)


async def build_adapter(
    settings: Settings,
) -> tuple[PersistenceAdapter, DatabaseSessionManager | None]:
    """Pick the persistence adapter. Returns the DB manager when one was created."""
    if settings.persistence_backend == "local":
        logger.info("Using local JSON store", extra={"operation": "compose"})
        return JsonFilePersistenceAdapter(settings.local_store_path), None

    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_create_schema:
        await db.create_schema()
    logger.info("Using SQL store", extra={"operation": "compose"})
    return SqlPersistenceAdapter(db), db


@asynccontextmanager
async def open_store(
    settings: Settings | None = None,
) -> AsyncGenerator[InspectionStore, None]:
    """Start a store session; discard it (and its engine) on exit."""
    settings = settings or get_settings()
    adapter, db = await build_adapter(settings)
    store = InspectionStore(
        adapter,
        description_limit=settings.history_description_limit,
        location_limit=settings.history_location_limit,
    )
    try:
        await store.load()
        yield store
    finally:
        await store.drain_history()
        if db is not None:
            await db.dispose()
