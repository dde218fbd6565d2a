"""Infrastructure Layer — persistence adapters and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Every adapter failure is mapped to a core error before it leaves this layer

Design Decisions:
    - Two adapters behind one Protocol (core/repository_protocols.py), picked once by
      the composition root
"""
