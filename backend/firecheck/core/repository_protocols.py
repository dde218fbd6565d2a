"""Boundary Protocols — the persistence adapter contract between core and shell.

Invariants:
    - Core NEVER imports an adapter implementation — dependency arrows point inward only
    - Records cross the boundary as plain dicts keyed by column name
    - insert assigns `id` (uuid4 text) and `created_at` when the record lacks them,
      and returns the canonical stored record
    - History kinds are keyed by `text`; every other kind by `id`
    - remove of a site or inspection deletes its dependents in the SAME backend
      transaction (all or nothing)
    - list returns sites and inspections newest first, issues oldest first,
      history entries in insertion order
    - Failures surface only as ResourceNotFoundError, ConflictError or
      PersistenceUnavailableError (core/errors.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, adapters share no base class
    - One generic CRUD surface keyed by EntityKind instead of a repository per entity:
      the network-backed and the local store implement the same four methods and
      the store never branches on which one is active
    - Async in Protocol: the local store is synchronous but wraps itself as coroutines
      so both realizations look identical to the caller
"""

from typing import Protocol

from firecheck.core.domain_types import EntityKind


class PersistenceAdapter(Protocol):
    """Durable storage boundary — implemented by infrastructure, chosen at startup."""

    async def list(self, kind: EntityKind) -> list[dict]: ...

    async def insert(self, kind: EntityKind, record: dict) -> dict: ...

    async def update(self, kind: EntityKind, record_id: str, patch: dict) -> dict: ...

    async def remove(self, kind: EntityKind, record_id: str) -> None: ...
