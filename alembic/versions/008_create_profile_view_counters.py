"""create profile_view_counters table (per viewer/day view count)

Revision ID: 008
Revises: 007
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profile_view_counters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("viewer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("view_date", sa.Date(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("viewer_id", "view_date", name="uq_profile_view_counters_viewer_day"),
    )
    # Backfill from existing rows
    op.execute(
        "INSERT INTO profile_view_counters (id, viewer_id, view_date, view_count) "
        "SELECT MIN(id), viewer_id, view_date, COUNT(*) FROM profile_views GROUP BY viewer_id, view_date"
    )


def downgrade() -> None:
    op.drop_table("profile_view_counters")
