"""Local Persistence Adapter — PersistenceAdapter over one JSON document on disk.

Invariants:
    - Every write works on a copy of the document, flushes it, THEN swaps it in:
      a failed flush leaves both the file and the in-memory document unchanged
    - The file is replaced atomically (temp file in the same directory + os.replace)
    - remove(site|inspection) drops every dependent in the same single write
    - path=None keeps the document in memory only (tests, throwaway sessions)
    - Same ordering and error contract as the SQL adapter (core/repository_protocols.py)

Design Decisions:
    - Synchronous store wrapped as coroutines: callers cannot tell it from the SQL
      adapter, and no call ever yields mid-write
    - Timestamps stored as ISO-8601 text: the document stays plain JSON
"""

import copy
import json
import logging
import os
import tempfile
import uuid
from datetime import date, datetime, timezone
from pathlib import Path

from firecheck.core.domain_types import EntityKind
from firecheck.core.errors import (
    ConflictError, PersistenceUnavailableError, ResourceNotFoundError,
)
from firecheck.infrastructure.observability import entity_extra

logger = logging.getLogger(__name__)

_HISTORY_KINDS = frozenset({
    EntityKind.DESCRIPTION_HISTORY, EntityKind.LOCATION_HISTORY,
})
_NEWEST_FIRST = frozenset({EntityKind.SITE, EntityKind.INSPECTION})
_IMMUTABLE_KEYS = frozenset({"id", "text", "created_at"})

# kind -> (child kind, foreign key on the child)
_CASCADES = {
    EntityKind.SITE: (EntityKind.INSPECTION, "site_id"),
    EntityKind.INSPECTION: (EntityKind.ISSUE, "inspection_id"),
}


class JsonFilePersistenceAdapter:
    """Synchronous local persistent store exposed through the async adapter surface."""

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path else None
        self._doc = self._read()

    # --- Adapter surface -------------------------------------------------------

    async def list(self, kind: EntityKind) -> list[dict]:
        rows = [dict(row) for row in self._doc[kind.value]]
        if kind in _HISTORY_KINDS:
            return rows
        # sorted() keeps equal timestamps in document order; reversing first puts
        # the later insert ahead on ties for newest-first kinds
        if kind in _NEWEST_FIRST:
            return sorted(reversed(rows), key=lambda r: r["created_at"], reverse=True)
        return sorted(rows, key=lambda r: r["created_at"])

    async def insert(self, kind: EntityKind, record: dict) -> dict:
        row = {key: _to_json(value) for key, value in record.items()}
        key_name = _key_name(kind)
        if kind not in _HISTORY_KINDS:
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        doc = copy.deepcopy(self._doc)
        if any(r[key_name] == row[key_name] for r in doc[kind.value]):
            raise ConflictError(f"{kind.value} '{row[key_name]}' already exists")
        doc[kind.value].append(row)
        self._commit(doc, "insert")
        logger.debug("Inserted record", extra=entity_extra(kind, row[key_name]))
        return dict(row)

    async def update(self, kind: EntityKind, record_id: str, patch: dict) -> dict:
        doc = copy.deepcopy(self._doc)
        row = _find(doc, kind, record_id)
        for key, value in patch.items():
            if key not in _IMMUTABLE_KEYS:
                row[key] = _to_json(value)
        self._commit(doc, "update")
        return dict(row)

    async def remove(self, kind: EntityKind, record_id: str) -> None:
        doc = copy.deepcopy(self._doc)
        _find(doc, kind, record_id)
        _remove_with_dependents(doc, kind, {record_id})
        self._commit(doc, "remove")
        logger.debug("Removed record", extra=entity_extra(kind, record_id))

    # --- Storage ---------------------------------------------------------------

    def _read(self) -> dict:
        doc: dict = {kind.value: [] for kind in EntityKind}
        if self._path is None or not self._path.exists():
            return doc
        try:
            loaded = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceUnavailableError(str(e), "read") from e
        for kind in EntityKind:
            doc[kind.value] = list(loaded.get(kind.value, []))
        return doc

    def _commit(self, doc: dict, operation: str) -> None:
        if self._path is not None:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(
                    dir=self._path.parent, prefix=self._path.name, suffix=".tmp",
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False)
                os.replace(tmp, self._path)
            except OSError as e:
                logger.error(
                    f"Local store write failed: {e}",
                    extra={"operation": operation},
                )
                raise PersistenceUnavailableError(str(e), operation) from e
        self._doc = doc


def _key_name(kind: EntityKind) -> str:
    return "text" if kind in _HISTORY_KINDS else "id"


def _find(doc: dict, kind: EntityKind, record_id: str) -> dict:
    key_name = _key_name(kind)
    for row in doc[kind.value]:
        if row[key_name] == record_id:
            return row
    raise ResourceNotFoundError(kind.value, record_id)


def _remove_with_dependents(doc: dict, kind: EntityKind, ids: set[str]) -> None:
    child = _CASCADES.get(kind)
    if child is not None:
        child_kind, foreign_key = child
        child_ids = {r["id"] for r in doc[child_kind.value] if r[foreign_key] in ids}
        if child_ids:
            _remove_with_dependents(doc, child_kind, child_ids)
    key_name = _key_name(kind)
    doc[kind.value] = [r for r in doc[kind.value] if r[key_name] not in ids]


def _to_json(value: object) -> object:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
