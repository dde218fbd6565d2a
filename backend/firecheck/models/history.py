"""History ORM — frequency/recency tables behind description and location autocomplete.

Invariants:
    - text is the primary key (exact-match lookup, one row per distinct text)
    - count >= 1; count and last_used only ever grow (enforced by core/history.py)
    - seq preserves insertion order for deterministic tie-breaks

Design Decisions:
    - Two tables sharing one mixin rather than one table with a discriminator:
      mirrors the two independent autocomplete lists
"""

from datetime import datetime

from sqlalchemy import Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from firecheck.db.base import Base


class _HistoryColumns:
    text: Mapped[str] = mapped_column(Text, primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_used: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class DescriptionHistory(_HistoryColumns, Base):
    """Previously used issue descriptions."""
    __tablename__ = "description_history"


class LocationHistory(_HistoryColumns, Base):
    """Previously used issue locations."""
    __tablename__ = "location_history"
