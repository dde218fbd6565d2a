"""History Ranking — pure bump/rank functions behind description and location autocomplete.

Invariants:
    - normalize_history_text strips surrounding whitespace; empty text is never recorded
    - bump_entry never decreases count and never moves last_used backward
    - Rankings are deterministic for a given table order:
        frequency -> count desc, last_used desc, then table (insertion) order
        recency   -> last_used desc, count desc, then table (insertion) order

Design Decisions:
    - Tables passed as ordered mappings text -> entry: insertion order is the final
      tie-break, so Python's stable sort gives it for free
    - `now` is a parameter, never read from the clock here (keeps core pure)
"""

from collections.abc import Mapping
from datetime import datetime

from firecheck.core.records import HistoryEntry


def normalize_history_text(text: str | None) -> str:
    """Key used for exact-match lookup. Empty string means 'do not record'."""
    return (text or "").strip()


def new_entry(text: str, now: datetime) -> HistoryEntry:
    return HistoryEntry(text=text, count=1, last_used=now)


def bump_entry(entry: HistoryEntry, now: datetime) -> HistoryEntry:
    """One more use of an existing entry. Monotonic in count and last_used."""
    return HistoryEntry(
        text=entry.text,
        count=entry.count + 1,
        last_used=max(entry.last_used, now),
    )


def top_by_frequency(
    table: Mapping[str, HistoryEntry], n: int,
) -> list[HistoryEntry]:
    """Most used first. Ties: most recent first, then insertion order."""
    ranked = sorted(
        table.values(),
        key=lambda e: (-e.count, -e.last_used.timestamp()),
    )
    return ranked[:max(n, 0)]


def top_by_recency(
    table: Mapping[str, HistoryEntry], n: int,
) -> list[HistoryEntry]:
    """Most recently used first. Ties: most used first, then insertion order."""
    ranked = sorted(
        table.values(),
        key=lambda e: (-e.last_used.timestamp(), -e.count),
    )
    return ranked[:max(n, 0)]
