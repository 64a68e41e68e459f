"""initial schema: users, conductors, deliveries, payments, reports

Revision ID: 5c1e2a7d9b40
Revises:
Create Date: 2026-10-17 10:12:44.118203

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5c1e2a7d9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="user"),
        sa.Column("company", sa.String(160), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("plan", sa.String(20), nullable=False, server_default="free"),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("subscription_expiry", sa.DateTime(), nullable=True),
        sa.Column("unlimited_deliveries", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unlimited_conductors", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("advanced_reports", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("api_access", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_manage_users", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_access_reports", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_manage_payments", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "conductors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("email", sa.String(254), nullable=True),
        sa.Column("vehicle_type", sa.String(40), nullable=True),
        sa.Column("license_plate", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_conductors_user_id", "conductors", ["user_id"])
    op.create_index(
        "uq_conductors_user_name_active",
        "conductors",
        ["user_id", "name"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "deliveries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("conductor_id", sa.Integer(), sa.ForeignKey("conductors.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("tracking", sa.String(50), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("delivery_date", sa.DateTime(), nullable=False),
        sa.Column("value", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("tracking", "user_id", name="uq_deliveries_tracking_user"),
        sa.CheckConstraint("status IN (0, 1, 2)", name="ck_deliveries_status"),
        sa.CheckConstraint("value >= 0", name="ck_deliveries_value_non_negative"),
    )
    op.create_index("ix_deliveries_user_date", "deliveries", ["user_id", "delivery_date"])
    op.create_index("ix_deliveries_user_status", "deliveries", ["user_id", "status"])
    op.create_index("ix_deliveries_user_type", "deliveries", ["user_id", "type"])
    op.create_index("ix_deliveries_user_conductor", "deliveries", ["user_id", "conductor_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="COP"),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("transaction_id", sa.String(100), nullable=True, unique=True),
        sa.Column("subscription_months", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_status", "payments", ["status"])

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("end_date", sa.DateTime(), nullable=True),
        sa.Column("conductor", sa.String(120), nullable=True),
        sa.Column("file_name", sa.String(200), nullable=True),
        sa.Column("generated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_reports_user_id", "reports", ["user_id"])
    op.create_index("ix_reports_generated_at", "reports", ["generated_at"])


def downgrade() -> None:
    op.drop_table("reports")
    op.drop_table("payments")
    op.drop_table("deliveries")
    op.drop_table("conductors")
    op.drop_table("users")
