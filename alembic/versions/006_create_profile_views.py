"""create profile_views table (freemium daily view limit)

Revision ID: 006
Revises: 005
Create Date: 2026-03-11

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profile_views",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("viewer_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("profile_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("view_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("viewer_id", "profile_id", "view_date", name="uq_profile_views_viewer_profile_day"),
    )


def downgrade() -> None:
    op.drop_table("profile_views")
