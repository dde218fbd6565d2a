"""API Layer — FastAPI routes and error handlers over the inspection store.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to InspectionStore; no grouping or validation logic here
"""
