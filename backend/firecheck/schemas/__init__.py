"""Pydantic Schemas — write payload validation at the store boundary.

Invariants:
    - Schemas validate every create/update payload before any adapter call
    - Domain enums from core/ used for vocabulary fields

Design Decisions:
    - Separate from core records: schemas are input contracts, records are state
"""
