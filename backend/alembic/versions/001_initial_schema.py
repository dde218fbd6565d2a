"""Initial schema — sites, inspections, issues and the two autocomplete history tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _history_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("text", sa.Text, primary_key=True),
        sa.Column("count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=False),
        sa.Column("seq", sa.Integer, nullable=False, server_default="0"),
    )


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("manager_name", sa.String(255), nullable=True),
        sa.Column("manager_phone", sa.String(50), nullable=True),
        sa.Column("manager_email", sa.String(255), nullable=True),
        sa.Column("approval_date", sa.Date, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "inspections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("site_id", sa.String(36), sa.ForeignKey("sites.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inspector", sa.String(255), nullable=False),
        sa.Column("inspection_type", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_inspections_site_id", "inspections", ["site_id"])

    op.create_table(
        "issues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("inspection_id", sa.String(36), sa.ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False),
        sa.Column("facility_type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("detail_location", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_issues_inspection_id", "issues", ["inspection_id"])

    _history_table("description_history")
    _history_table("location_history")


def downgrade() -> None:
    op.drop_table("location_history")
    op.drop_table("description_history")
    op.drop_index("ix_issues_inspection_id", table_name="issues")
    op.drop_table("issues")
    op.drop_index("ix_inspections_site_id", table_name="inspections")
    op.drop_table("inspections")
    op.drop_table("sites")
