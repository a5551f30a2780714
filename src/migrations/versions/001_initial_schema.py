"""Initial schema: villages, users, apartments and the ledger source tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Full name"),
        sa.Column("email", sa.String(length=255), nullable=True, comment="Login email"),
        sa.Column(
            "role",
            sa.Enum("SUPER_ADMIN", "ADMIN", "OWNER", "RENTER", name="userrole"),
            nullable=False,
            comment="super_admin, admin, owner or renter",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.Index("ix_users_name", "name"),
        sa.Index("ix_users_is_active", "is_active"),
        sa.Index("idx_user_role_active", "role", "is_active"),
    )

    op.create_table(
        "villages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "electricity_price",
            sa.Numeric(10, 4),
            nullable=False,
            server_default="0",
            comment="Price per electricity unit in EGP",
        ),
        sa.Column(
            "water_price",
            sa.Numeric(10, 4),
            nullable=False,
            server_default="0",
            comment="Price per water unit in EGP",
        ),
        sa.Column("phases", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("electricity_price >= 0", name="ck_village_electricity_price"),
        sa.CheckConstraint("water_price >= 0", name="ck_village_water_price"),
        sa.CheckConstraint("phases >= 1", name="ck_village_phases"),
    )

    op.create_table(
        "apartments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("village_id", sa.Integer(), nullable=False),
        sa.Column("phase", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["village_id"], ["villages.id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_apartments_village_id", "village_id"),
        sa.Index("ix_apartments_owner_id", "owner_id"),
        sa.Index("idx_apartment_village_phase", "village_id", "phase"),
        sa.Index("idx_apartment_name", "name"),
        sa.CheckConstraint("phase >= 1", name="ck_apartment_phase"),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False, comment="Payment amount"),
        sa.Column(
            "currency",
            sa.String(length=3),
            nullable=False,
            server_default="EGP",
            comment="ISO currency code (EGP or GBP)",
        ),
        sa.Column("user_type", sa.Enum("OWNER", "RENTER", name="payertype"), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        sa.Index("ix_payments_apartment_id", "apartment_id"),
        sa.Index("ix_payments_payment_date", "payment_date"),
        sa.Index("idx_payment_apartment_currency", "apartment_id", "currency"),
    )

    op.create_table(
        "service_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("service_name", sa.String(length=255), nullable=False),
        sa.Column("cost", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column(
            "currency",
            sa.Enum("EGP", "GBP", name="currency"),
            nullable=False,
        ),
        sa.Column(
            "who_pays",
            sa.Enum("OWNER", "RENTER", "COMPANY", name="whopays"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("cost >= 0", name="ck_service_request_cost_non_negative"),
        sa.Index("ix_service_requests_apartment_id", "apartment_id"),
        sa.Index("idx_service_request_apartment_currency", "apartment_id", "currency"),
    )

    op.create_table(
        "utility_readings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("apartment_id", sa.Integer(), nullable=False),
        sa.Column("water_start_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("water_end_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("electricity_start_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("electricity_end_reading", sa.Numeric(12, 2), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "who_pays",
            sa.Enum("OWNER", "RENTER", "COMPANY", name="whopays"),
            nullable=False,
            comment="owner, renter or company",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["apartment_id"], ["apartments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_utility_readings_apartment_id", "apartment_id"),
        sa.Index("idx_utility_apartment_who_pays", "apartment_id", "who_pays"),
    )


def downgrade() -> None:
    op.drop_table("utility_readings")
    op.drop_table("service_requests")
    op.drop_table("payments")
    op.drop_table("apartments")
    op.drop_table("villages")
    op.drop_table("users")
