"""create bookings, slot configs, audit logs and rate limits

Revision ID: e4b7c1d2a9f0
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "e4b7c1d2a9f0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "bookings",
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("clinic_email", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("cancel_token", sa.String(length=64), nullable=False),
        sa.Column("seat", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("service", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("clinic_name", sa.String(length=255), nullable=False),
        sa.Column("clinic_phone", sa.String(length=255), nullable=False),
        sa.Column("clinic_address", sa.String(length=255), nullable=False),
        sa.Column("website_url", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_by_owner", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", "time", "clinic_email", "seat", name="uq_booking_slot_seat"),
    )
    with op.batch_alter_table("bookings", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_bookings_clinic_email"), ["clinic_email"], unique=False)
        batch_op.create_index("ix_bookings_slot", ["date", "time", "clinic_email"], unique=False)

    op.create_table(
        "slot_configs",
        sa.Column("tenant", sa.String(length=255), nullable=False),
        sa.Column("slots_per_hour", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("tenant"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("actor", sa.String(length=20), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity", sa.String(length=80), nullable=True),
        sa.Column("entity_id", sa.String(length=80), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "ip_rate_limits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scope", sa.String(length=40), nullable=False),
        sa.Column("ip", sa.String(length=64), nullable=False),
        sa.Column("window_start", sa.DateTime(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("scope", "ip", name="uq_rate_limit_scope_ip"),
    )
    with op.batch_alter_table("ip_rate_limits", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_ip_rate_limits_ip"), ["ip"], unique=False)


def downgrade():
    with op.batch_alter_table("ip_rate_limits", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_ip_rate_limits_ip"))
    op.drop_table("ip_rate_limits")

    op.drop_table("audit_logs")
    op.drop_table("slot_configs")

    with op.batch_alter_table("bookings", schema=None) as batch_op:
        batch_op.drop_index("ix_bookings_slot")
        batch_op.drop_index(batch_op.f("ix_bookings_clinic_email"))
    op.drop_table("bookings")
