"""create matches table

Revision ID: 003
Revises: 002
Create Date: 2026-03-04

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "matches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_one_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("user_two_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("request_id", sa.String(36), sa.ForeignKey("connection_requests.id"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("photos_hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unmatched_by", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("matches")
