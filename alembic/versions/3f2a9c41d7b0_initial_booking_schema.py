"""Initial booking schema

Revision ID: 3f2a9c41d7b0
Revises:
Create Date: 2026-10-19 09:12:31.402113

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f2a9c41d7b0"
down_revision = None
branch_labels = None
depends_on = None

BigIntId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(191), nullable=False, unique=True),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("points_balance", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "rooms",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(191), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "class_schedules",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(191), nullable=False),
        sa.Column("room_id", BigIntId, sa.ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "bookings",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("user_id", BigIntId, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("room_id", BigIntId, sa.ForeignKey("rooms.id"), nullable=True),
        sa.Column("class_schedule_id", BigIntId, sa.ForeignKey("class_schedules.id"), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("holds_expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("ends_at > starts_at", name="ck_bookings_interval"),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index(
        "ix_bookings_room_window", "bookings", ["room_id", "status", "starts_at", "ends_at"]
    )
    op.create_index(
        "ix_bookings_schedule_window",
        "bookings",
        ["class_schedule_id", "status", "starts_at", "ends_at"],
    )
    op.create_index("ix_bookings_status_hold", "bookings", ["status", "holds_expires_at"])

    op.create_table(
        "payments",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("booking_id", BigIntId, sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("provider", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"])

    op.create_table(
        "points_ledger",
        sa.Column("id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("user_id", BigIntId, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("delta", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("booking_id", BigIntId, sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_points_ledger_user_created", "points_ledger", ["user_id", "created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_points_ledger_user_created", table_name="points_ledger")
    op.drop_table("points_ledger")
    op.drop_index("ix_payments_booking_id", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_bookings_status_hold", table_name="bookings")
    op.drop_index("ix_bookings_schedule_window", table_name="bookings")
    op.drop_index("ix_bookings_room_window", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("class_schedules")
    op.drop_table("rooms")
    op.drop_table("users")
