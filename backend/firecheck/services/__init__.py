"""Services Layer — async orchestration around the pure core.

Invariants:
    - Services talk to storage only through the PersistenceAdapter Protocol
    - The composition root is the only place that knows which adapter is in use

Design Decisions:
    - Imperative shell: await IO, then hand results to core functions
"""
