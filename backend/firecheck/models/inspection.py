"""Inspection ORM — persists one inspection event at a site.

Invariants:
    - Always belongs to a Site (site_id FK, ON DELETE CASCADE)
    - inspection_type is one of the InspectionType values (checked at the schema layer)
    - created_at immutable after insert

Design Decisions:
    - cascade delete for issues: removing an inspection is one transaction
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from firecheck.db.base import Base


class Inspection(Base):
    """Inspection entity — one visit by one inspector."""
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    inspector: Mapped[str] = mapped_column(String(255), nullable=False)
    inspection_type: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    site: Mapped["Site"] = relationship("Site", back_populates="inspections")
    issues: Mapped[list["Issue"]] = relationship(
        "Issue", back_populates="inspection",
        cascade="all, delete-orphan", lazy="selectin",
    )
