"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

import uuid
from datetime import datetime, time

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from swiftroute.adapters.persistence.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class PartnerModel(Base):
    __tablename__ = "delivery_partners"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    areas: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    shift_start: Mapped[time] = mapped_column(Time, nullable=False)
    shift_end: Mapped[time] = mapped_column(Time, nullable=False)
    current_load: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    completed_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cancelled_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    orders: Mapped[list["OrderModel"]] = relationship(back_populates="partner")
    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="partner")

    __table_args__ = (
        CheckConstraint("current_load >= 0", name="ck_partners_load_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_partners_rating_range"),
        Index("idx_partners_status", "status"),
    )


class OrderModel(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    items: Mapped[list[dict]] = mapped_column(JSONB, nullable=False, default=list)
    area: Mapped[str] = mapped_column(String(100), nullable=False)
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)
    order_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    assigned_partner_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("delivery_partners.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    partner: Mapped["PartnerModel | None"] = relationship(back_populates="orders")
    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="order")

    __table_args__ = (
        CheckConstraint(
            "(assigned_partner_id IS NOT NULL) = (status IN ('assigned', 'picked', 'delivered'))",
            name="ck_orders_partner_matches_status",
        ),
        Index("idx_orders_status", "status"),
        Index("idx_orders_created_at", "created_at"),
    )


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    partner_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("delivery_partners.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    order: Mapped["OrderModel"] = relationship(back_populates="assignments")
    partner: Mapped["PartnerModel | None"] = relationship(back_populates="assignments")

    __table_args__ = (
        CheckConstraint(
            "status <> 'failed' OR char_length(reason) >= 10",
            name="ck_assignments_failed_reason",
        ),
        Index("idx_assignments_order_created", "order_id", "created_at"),
        Index("idx_assignments_status", "status"),
    )


class LoadAdjustmentModel(Base):
    __tablename__ = "partner_load_adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    partner_id: Mapped[str] = mapped_column(String(36), nullable=False)
    delta: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    applied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_load_adjustments_pending", "applied_at"),)
