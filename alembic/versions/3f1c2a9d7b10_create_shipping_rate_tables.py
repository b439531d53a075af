"""create shipping methods / zones / rates

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 10:12:04.118203
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "shipping_methods",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("carrier", sa.String(length=64), nullable=False),
        sa.Column("service_code", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_days_min", sa.Integer(), nullable=True),
        sa.Column("estimated_days_max", sa.Integer(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "shipping_zones",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("countries", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "shipping_rates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "shipping_method_id",
            sa.Integer(),
            sa.ForeignKey("shipping_methods.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "shipping_zone_id",
            sa.Integer(),
            sa.ForeignKey("shipping_zones.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("min_weight", sa.Integer(), nullable=False),
        sa.Column("max_weight", sa.Integer(), nullable=True),
        sa.Column("min_total", sa.BigInteger(), nullable=False),
        sa.Column("max_total", sa.BigInteger(), nullable=True),
        sa.Column("rate", sa.BigInteger(), nullable=False),
        sa.Column("free_threshold", sa.BigInteger(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("min_weight >= 0", name="ck_shipping_rates_min_weight"),
        sa.CheckConstraint("min_total >= 0", name="ck_shipping_rates_min_total"),
        sa.CheckConstraint("max_weight IS NULL OR max_weight >= min_weight", name="ck_shipping_rates_weight_range"),
        sa.CheckConstraint("max_total IS NULL OR max_total >= min_total", name="ck_shipping_rates_total_range"),
        sa.CheckConstraint("rate >= 0", name="ck_shipping_rates_rate"),
        sa.CheckConstraint("free_threshold IS NULL OR free_threshold >= 0", name="ck_shipping_rates_free_threshold"),
    )

    op.create_index(
        "ix_shipping_rates_method_zone",
        "shipping_rates",
        ["shipping_method_id", "shipping_zone_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_shipping_rates_method_zone", table_name="shipping_rates")
    op.drop_table("shipping_rates")
    op.drop_table("shipping_zones")
    op.drop_table("shipping_methods")
