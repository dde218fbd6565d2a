"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Site is the aggregate root: inspections and issues cascade from it

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from firecheck.models.site import Site  # noqa: F401
from firecheck.models.inspection import Inspection  # noqa: F401
from firecheck.models.issue import Issue  # noqa: F401
from firecheck.models.history import DescriptionHistory, LocationHistory  # noqa: F401
