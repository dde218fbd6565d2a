"""History Tracker — frequency/recency tables behind description and location autocomplete.

Invariants:
    - NEVER raises from load() or record_use(): failures are logged and swallowed
      (history is a non-authoritative side channel)
    - A failed write leaves the in-memory table exactly as it was
    - An insert that conflicts with a persisted row means the table is stale (its
      load failed or another process wrote first): the table is re-read from the
      adapter and the persisted entry is bumped, so no use is lost once the
      backend answers again
    - record_use calls are serialized by one lock: concurrent uses of the same text
      never lose an increment inside this process
    - Reads (top_by_*) never wait for the lock: they see the last completed write

Design Decisions:
    - In-memory tables hydrated once from the adapter, then written through: ranking
      needs no round trip
    - Tables replaced copy-on-write (new dict per write) so a reader iterating a table
      is never disturbed by a concurrent record_use
    - Pure bump/rank logic lives in core/history.py; this class only does IO
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from firecheck.core.domain_types import HistoryTable
from firecheck.core.errors import ConflictError
from firecheck.core.history import (
    bump_entry, new_entry, normalize_history_text, top_by_frequency, top_by_recency,
)
from firecheck.core.records import HistoryEntry
from firecheck.core.repository_protocols import PersistenceAdapter

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryTracker:
    """Best-effort usage history for issue descriptions and locations."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._adapter = adapter
        self._clock = clock
        self._lock = asyncio.Lock()
        self._tables: dict[HistoryTable, dict[str, HistoryEntry]] = {
            table: {} for table in HistoryTable
        }

    async def load(self) -> None:
        """Hydrate both tables from the adapter. Failures leave a table empty."""
        for table in HistoryTable:
            try:
                rows = await self._adapter.list(table.entity_kind)
            except Exception as e:
                logger.warning(
                    f"Could not load {table.value} history: {e}",
                    extra={"history_table": table.value},
                )
                continue
            entries = (HistoryEntry.from_row(row) for row in rows)
            self._tables[table] = {entry.text: entry for entry in entries}

    async def record_use(self, table: HistoryTable, text: str | None) -> HistoryEntry | None:
        """Count one use of `text`. Returns the stored entry, or None if skipped/failed."""
        key = normalize_history_text(text)
        if not key:
            return None
        async with self._lock:
            try:
                entry = await self._write(table, key)
            except Exception as e:
                logger.warning(
                    f"History update failed for {table.value}: {e}",
                    exc_info=True,
                    extra={"history_table": table.value},
                )
                return None
            self._tables[table] = {**self._tables[table], entry.text: entry}
            return entry

    async def _write(self, table: HistoryTable, key: str) -> HistoryEntry:
        now = self._clock()
        existing = self._tables[table].get(key)
        if existing is None:
            try:
                row = await self._adapter.insert(
                    table.entity_kind, new_entry(key, now).to_row(),
                )
                return HistoryEntry.from_row(row)
            except ConflictError:
                # Table is stale (e.g. its load failed): resync, then bump
                existing = await self._resync(table, key)
        bumped = bump_entry(existing, now)
        row = await self._adapter.update(
            table.entity_kind, key,
            {"count": bumped.count, "last_used": bumped.last_used},
        )
        return HistoryEntry.from_row(row)

    async def _resync(self, table: HistoryTable, key: str) -> HistoryEntry:
        """Replace one table with the persisted rows; return the entry for `key`."""
        rows = await self._adapter.list(table.entity_kind)
        entries = (HistoryEntry.from_row(row) for row in rows)
        self._tables[table] = {entry.text: entry for entry in entries}
        logger.info(
            f"Resynced {table.value} history ({len(self._tables[table])} entries)",
            extra={"history_table": table.value},
        )
        return self._tables[table][key]

    # --- Reads (best-effort, lock-free) ----------------------------------------

    def top_by_frequency(self, table: HistoryTable, n: int) -> list[HistoryEntry]:
        return top_by_frequency(self._tables[table], n)

    def top_by_recency(self, table: HistoryTable, n: int) -> list[HistoryEntry]:
        return top_by_recency(self._tables[table], n)

    def entries(self, table: HistoryTable) -> list[HistoryEntry]:
        """All entries of one table in insertion order."""
        return list(self._tables[table].values())
