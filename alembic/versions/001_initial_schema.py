"""Initial schema — partners, orders, assignments, load adjustment queue.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Delivery partners
    op.create_table(
        "delivery_partners",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("areas", ARRAY(sa.String(100)), nullable=False, server_default="{}"),
        sa.Column("shift_start", sa.Time, nullable=False),
        sa.Column("shift_end", sa.Time, nullable=False),
        sa.Column("current_load", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rating", sa.Float, nullable=False, server_default="0"),
        sa.Column("completed_orders", sa.Integer, nullable=False, server_default="0"),
        sa.Column("cancelled_orders", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint("current_load >= 0", name="ck_partners_load_non_negative"),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_partners_rating_range"),
    )
    op.create_index("idx_partners_status", "delivery_partners", ["status"])

    # Orders
    op.create_table(
        "orders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("items", JSONB, nullable=False, server_default="[]"),
        sa.Column("area", sa.String(100), nullable=False),
        sa.Column("delivery_address", sa.Text, nullable=False),
        sa.Column("order_value", sa.Float, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(
            "assigned_partner_id",
            sa.String(36),
            sa.ForeignKey("delivery_partners.id"),
            nullable=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint(
            "(assigned_partner_id IS NOT NULL) = (status IN ('assigned', 'picked', 'delivered'))",
            name="ck_orders_partner_matches_status",
        ),
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_created_at", "orders", ["created_at"])

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "order_id",
            sa.String(36),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "partner_id", sa.String(36), sa.ForeignKey("delivery_partners.id"), nullable=True
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint(
            "status <> 'failed' OR char_length(reason) >= 10",
            name="ck_assignments_failed_reason",
        ),
    )
    op.create_index("idx_assignments_order_created", "assignments", ["order_id", "created_at"])
    op.create_index("idx_assignments_status", "assignments", ["status"])

    # Pending partner load adjustments
    op.create_table(
        "partner_load_adjustments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("partner_id", sa.String(36), nullable=False),
        sa.Column("delta", sa.Integer, nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_load_adjustments_pending", "partner_load_adjustments", ["applied_at"])


def downgrade() -> None:
    op.drop_table("partner_load_adjustments")
    op.drop_table("assignments")
    op.drop_table("orders")
    op.drop_table("delivery_partners")
