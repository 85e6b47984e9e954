"""create connection_requests table, one pending request per pair and type

Revision ID: 002
Revises: 001
Create Date: 2026-03-02

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy import text

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "connection_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("request_type", sa.String(20), nullable=False, index=True),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("requested_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("responded_at", sa.DateTime(), nullable=True),
        sa.Column("reminder_first_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_second_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_final_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("requester_id <> requested_id", name="ck_connection_requests_not_self"),
    )
    # One pending row per (requester, requested, type) (partial unique index)
    op.create_index(
        "ix_connection_requests_one_pending",
        "connection_requests",
        ["requester_id", "requested_id", "request_type"],
        unique=True,
        postgresql_where=text("status = 'pending'"),
        sqlite_where=text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("ix_connection_requests_one_pending", table_name="connection_requests")
    op.drop_table("connection_requests")
