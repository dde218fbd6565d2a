"""SQL Persistence Adapter — PersistenceAdapter over SQLAlchemy async ORM.

Invariants:
    - Each call runs in its own session and commits before returning (one call, one
      transaction)
    - remove(site|inspection) deletes dependents through ORM cascade in that same
      transaction: either everything goes or nothing does
    - Missing ids raise ResourceNotFoundError; duplicate keys raise ConflictError
      (via DatabaseSessionManager); connectivity failures PersistenceUnavailableError
    - Rows leave as plain dicts of column values; unknown keys in input are dropped
    - Primary keys and created_at are never changed by update

Design Decisions:
    - Explicit kind -> model and kind -> ordering dicts (no getattr magic)
    - noload on list/update: relationships are only materialized for remove, where
      ORM cascade needs them
    - History seq assigned as max(seq)+1 inside the insert transaction: stable
      insertion order for ranking tie-breaks on every backend
"""

import logging

from sqlalchemy import Date, DateTime, func, select
from sqlalchemy.orm import noload

from firecheck.core.domain_types import EntityKind
from firecheck.core.errors import ResourceNotFoundError
from firecheck.core.records import parse_date, parse_datetime
from firecheck.db.base import Base
from firecheck.infrastructure.database import DatabaseSessionManager
from firecheck.infrastructure.observability import entity_extra
from firecheck.models import (
    DescriptionHistory, Inspection, Issue, LocationHistory, Site,
)

logger = logging.getLogger(__name__)

_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.SITE: Site,
    EntityKind.INSPECTION: Inspection,
    EntityKind.ISSUE: Issue,
    EntityKind.DESCRIPTION_HISTORY: DescriptionHistory,
    EntityKind.LOCATION_HISTORY: LocationHistory,
}

_ORDERING = {
    EntityKind.SITE: (Site.created_at.desc(),),
    EntityKind.INSPECTION: (Inspection.created_at.desc(),),
    EntityKind.ISSUE: (Issue.created_at.asc(),),
    EntityKind.DESCRIPTION_HISTORY: (DescriptionHistory.seq.asc(),),
    EntityKind.LOCATION_HISTORY: (LocationHistory.seq.asc(),),
}

_HISTORY_KINDS = frozenset({
    EntityKind.DESCRIPTION_HISTORY, EntityKind.LOCATION_HISTORY,
})
_IMMUTABLE_COLUMNS = frozenset({"id", "text", "created_at", "seq"})
_HIDDEN_COLUMNS = frozenset({"seq"})


class SqlPersistenceAdapter:
    """Network-reachable durable store (PostgreSQL in production, SQLite locally)."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def list(self, kind: EntityKind) -> list[dict]:
        model = _MODELS[kind]
        async with self._db.session() as session:
            result = await session.execute(
                select(model).options(noload("*")).order_by(*_ORDERING[kind]),
            )
            return [_to_row(obj) for obj in result.scalars().all()]

    async def insert(self, kind: EntityKind, record: dict) -> dict:
        model = _MODELS[kind]
        values = _coerce(model, record)
        async with self._db.session() as session:
            if kind in _HISTORY_KINDS:
                current = await session.scalar(select(func.max(model.seq)))
                values["seq"] = (current or 0) + 1
            obj = model(**values)
            session.add(obj)
            await session.commit()
            row = _to_row(obj)
        logger.debug("Inserted record", extra=entity_extra(kind, _key_of(kind, row)))
        return row

    async def update(self, kind: EntityKind, record_id: str, patch: dict) -> dict:
        model = _MODELS[kind]
        values = {
            k: v for k, v in _coerce(model, patch).items()
            if k not in _IMMUTABLE_COLUMNS
        }
        async with self._db.session() as session:
            obj = await session.get(model, record_id, options=[noload("*")])
            if obj is None:
                raise ResourceNotFoundError(kind.value, record_id)
            for key, value in values.items():
                setattr(obj, key, value)
            await session.commit()
            return _to_row(obj)

    async def remove(self, kind: EntityKind, record_id: str) -> None:
        model = _MODELS[kind]
        async with self._db.session() as session:
            # Default (selectin) loading: cascade needs the dependent collections
            obj = await session.get(model, record_id)
            if obj is None:
                raise ResourceNotFoundError(kind.value, record_id)
            await session.delete(obj)
            await session.commit()
        logger.debug("Removed record", extra=entity_extra(kind, record_id))


def _key_of(kind: EntityKind, row: dict) -> str:
    return row["text"] if kind in _HISTORY_KINDS else row["id"]


def _coerce(model: type[Base], record: dict) -> dict:
    """Keep only mapped columns; turn ISO strings into date/datetime objects."""
    columns = model.__table__.columns
    values = {}
    for key, value in record.items():
        if key not in columns:
            continue
        column_type = columns[key].type
        if isinstance(column_type, DateTime):
            value = parse_datetime(value)
        elif isinstance(column_type, Date):
            value = parse_date(value)
        values[key] = value
    return values


def _to_row(obj: Base) -> dict:
    return {
        column.key: getattr(obj, column.key)
        for column in obj.__table__.columns
        if column.key not in _HIDDEN_COLUMNS
    }
