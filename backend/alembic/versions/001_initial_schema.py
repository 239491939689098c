"""Initial schema — users, loans, applications, notifications.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("photo_url", sa.String(1000), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="borrower"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "loans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("interest_rate", sa.Float, nullable=False),
        sa.Column("max_limit", sa.Float, nullable=True),
        sa.Column("show_on_home", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("added_by", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_loans_category", "loans", ["category"])

    op.create_table(
        "applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("loan_id", sa.String(36), nullable=False),
        sa.Column("loan_title", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("fee_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("details", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_applications_user_email", "applications", ["user_email"])
    op.create_index("ix_applications_loan_id", "applications", ["loan_id"])
    op.create_index("ix_applications_status", "applications", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("path", sa.String(500), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_notifications_user_email", "notifications", ["user_email"])
    op.create_index("ix_notifications_timestamp", "notifications", ["timestamp"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("applications")
    op.drop_table("loans")
    op.drop_table("users")
