"""Site ORM — persists the aggregate root for inspections.

Invariants:
    - id is uuid4 text primary key
    - name and address are non-nullable
    - created_at is set once on insert and never updated

Design Decisions:
    - String(36) ids over the postgresql UUID type: one schema for PostgreSQL and SQLite
    - cascade delete for inspections (and transitively their issues)
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from firecheck.db.base import Base


class Site(Base):
    """Site aggregate root — owns its inspections."""
    __tablename__ = "sites"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    manager_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manager_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    manager_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    approval_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    inspections: Mapped[list["Inspection"]] = relationship(
        "Inspection", back_populates="site",
        cascade="all, delete-orphan", lazy="selectin",
    )
