"""initial kit rental schema

Revision ID: 0001
Revises:
Create Date: 2025-06-01
"""
from alembic import op
import sqlalchemy as sa

from kitrent.models.generated import BLOCKING_KIT_PREDICATE

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "time_slots",
        sa.Column("code", sa.Text(), nullable=False, unique=True),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, unique=True),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("id", sa.Integer(), primary_key=True),
    )
    op.create_table(
        "kits",
        sa.Column("number", sa.Integer(), nullable=False, unique=True),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("id", sa.Integer(), primary_key=True),
    )
    op.create_table(
        "services",
        sa.Column("code", sa.String(length=13), nullable=False, unique=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("price_rub", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("prepayment_rub", sa.Float()),
    )
    op.create_table(
        "addresses",
        sa.Column("client_ref", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("address_line", sa.Text(), nullable=False),
        sa.Column("contact_name", sa.Text(), nullable=False),
        sa.Column("contact_phone", sa.Text(), nullable=False),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.Text(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_table(
        "bookings",
        sa.Column("client_ref", sa.Text(), nullable=False),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("status", sa.String(length=19), nullable=False),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.Text(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("address_id", sa.Integer(), sa.ForeignKey("addresses.id")),
        sa.Column("scheduled_date", sa.Date()),
        sa.Column("time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id")),
        sa.Column("kit_id", sa.Integer(), sa.ForeignKey("kits.id")),
        sa.Column("details", sa.Text()),
    )
    op.create_index(
        "uq_bookings_date_slot_kit",
        "bookings",
        ["scheduled_date", "time_slot_id", "kit_id"],
        unique=True,
        sqlite_where=sa.text(BLOCKING_KIT_PREDICATE),
        postgresql_where=sa.text(BLOCKING_KIT_PREDICATE),
    )
    op.create_index("ix_bookings_scheduled_date", "bookings", ["scheduled_date"])
    op.create_index("ix_bookings_client_ref", "bookings", ["client_ref"])


def downgrade():
    op.drop_index("ix_bookings_client_ref", table_name="bookings")
    op.drop_index("ix_bookings_scheduled_date", table_name="bookings")
    op.drop_index("uq_bookings_date_slot_kit", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("addresses")
    op.drop_table("services")
    op.drop_table("kits")
    op.drop_table("time_slots")
