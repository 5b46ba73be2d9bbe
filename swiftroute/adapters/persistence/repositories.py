"""SQLAlchemy repository implementations."""

from __future__ import annotations

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swiftroute.adapters.persistence.models import (
    AssignmentModel,
    LoadAdjustmentModel,
    OrderModel,
    PartnerModel,
)
from swiftroute.application.ports.assignment_repo import AssignmentRepository
from swiftroute.application.ports.load_adjustment_repo import LoadAdjustmentRepository
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.transaction import TransactionPort
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.assignment import (
    Assignment,
    AssignmentMetrics,
    FailedAssignmentInfo,
    LoadAdjustment,
)
from swiftroute.domain.entities.order import Order, OrderItem
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.errors import ConflictError
from swiftroute.domain.value_objects.enums import (
    AssignmentStatus,
    OrderStatus,
    PartnerStatus,
)
from swiftroute.domain.value_objects.shift_window import ShiftWindow

# ─── Mappers ─────────────────────────────────────────────────────────


def _partner_to_domain(m: PartnerModel) -> Partner:
    return Partner(
        id=m.id,
        name=m.name,
        email=m.email,
        phone=m.phone,
        status=PartnerStatus(m.status),
        assigned_areas=list(m.areas) if m.areas else [],
        shift=ShiftWindow(start=m.shift_start, end=m.shift_end),
        current_load=m.current_load,
        rating=m.rating,
        completed_orders=m.completed_orders,
        cancelled_orders=m.cancelled_orders,
        created_at=m.created_at,
    )


def _order_to_domain(m: OrderModel) -> Order:
    return Order(
        id=m.id,
        customer_name=m.customer_name,
        customer_phone=m.customer_phone,
        items=[OrderItem(name=i["name"], quantity=int(i.get("quantity", 1))) for i in (m.items or [])],
        area=m.area,
        delivery_address=m.delivery_address,
        order_value=m.order_value,
        status=OrderStatus(m.status),
        assigned_partner_id=m.assigned_partner_id,
        created_at=m.created_at,
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        order_id=m.order_id,
        partner_id=m.partner_id,
        status=AssignmentStatus(m.status),
        reason=m.reason,
        created_at=m.created_at,
    )


def _adjustment_to_domain(m: LoadAdjustmentModel) -> LoadAdjustment:
    return LoadAdjustment(
        id=m.id,
        partner_id=m.partner_id,
        delta=m.delta,
        reason=m.reason,
        created_at=m.created_at,
        applied_at=m.applied_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlTransaction(TransactionPort):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def commit(self) -> None:
        await self._s.commit()

    async def rollback(self) -> None:
        await self._s.rollback()


class SqlOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, order: Order) -> Order:
        order.created_at = order.created_at or utcnow()
        m = OrderModel(
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            items=[{"name": i.name, "quantity": i.quantity} for i in order.items],
            area=order.area,
            delivery_address=order.delivery_address,
            order_value=order.order_value,
            status=order.status.value,
            assigned_partner_id=order.assigned_partner_id,
            created_at=order.created_at,
        )
        if order.id:
            m.id = order.id
        self._s.add(m)
        await self._s.flush()
        order.id = m.id
        return order

    async def get_by_id(self, order_id: str) -> Order | None:
        m = await self._s.get(OrderModel, order_id)
        return _order_to_domain(m) if m else None

    async def list(self, status: OrderStatus | None = None) -> list[Order]:
        query = select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if status is not None:
            query = query.where(OrderModel.status == status.value)
        result = await self._s.execute(query)
        return [_order_to_domain(m) for m in result.scalars()]

    async def update(self, order: Order) -> Order:
        await self._s.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id)
            .values(status=order.status.value, assigned_partner_id=order.assigned_partner_id)
        )
        await self._s.flush()
        return order

    async def assign_if_pending(self, order_id: str, partner_id: str) -> bool:
        result = await self._s.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == OrderStatus.PENDING.value)
            .values(status=OrderStatus.ASSIGNED.value, assigned_partner_id=partner_id)
        )
        return result.rowcount == 1

    async def revert_to_pending(self, order_id: str) -> bool:
        result = await self._s.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status.not_in(
                    [OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value]
                ),
            )
            .values(status=OrderStatus.PENDING.value, assigned_partner_id=None)
        )
        return result.rowcount == 1


class SqlPartnerRepository(PartnerRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, partner: Partner) -> Partner:
        partner.created_at = partner.created_at or utcnow()
        m = PartnerModel(
            name=partner.name,
            email=partner.email,
            phone=partner.phone,
            status=partner.status.value,
            areas=list(partner.assigned_areas),
            shift_start=partner.shift.start,
            shift_end=partner.shift.end,
            current_load=partner.current_load,
            rating=partner.rating,
            completed_orders=partner.completed_orders,
            cancelled_orders=partner.cancelled_orders,
            created_at=partner.created_at,
        )
        if partner.id:
            m.id = partner.id
        self._s.add(m)
        await self._s.flush()
        partner.id = m.id
        return partner

    async def get_by_id(self, partner_id: str) -> Partner | None:
        m = await self._s.get(PartnerModel, partner_id)
        return _partner_to_domain(m) if m else None

    async def get_all(self) -> list[Partner]:
        result = await self._s.execute(
            select(PartnerModel).order_by(PartnerModel.name, PartnerModel.id)
        )
        return [_partner_to_domain(m) for m in result.scalars()]

    async def update(self, partner: Partner) -> Partner:
        await self._s.execute(
            update(PartnerModel)
            .where(PartnerModel.id == partner.id)
            .values(
                name=partner.name,
                email=partner.email,
                phone=partner.phone,
                status=partner.status.value,
                areas=list(partner.assigned_areas),
                shift_start=partner.shift.start,
                shift_end=partner.shift.end,
                current_load=partner.current_load,
                rating=partner.rating,
            )
        )
        await self._s.flush()
        return partner

    async def delete(self, partner_id: str) -> bool:
        try:
            result = await self._s.execute(
                delete(PartnerModel).where(PartnerModel.id == partner_id)
            )
        except IntegrityError as e:
            await self._s.rollback()
            raise ConflictError(
                f"Failed to delete partner {partner_id[:8]}... because they are still referenced "
                "in other records (e.g., assigned orders). Please reassign or complete their orders first.",
                detail="Foreign key constraint violation",
            ) from e
        return result.rowcount > 0

    async def increment_load_if_below(self, partner_id: str, ceiling: int) -> bool:
        result = await self._s.execute(
            update(PartnerModel)
            .where(PartnerModel.id == partner_id, PartnerModel.current_load < ceiling)
            .values(current_load=PartnerModel.current_load + 1)
        )
        return result.rowcount == 1

    async def decrement_load(self, partner_id: str) -> bool:
        result = await self._s.execute(
            update(PartnerModel)
            .where(PartnerModel.id == partner_id)
            .values(
                current_load=case(
                    (PartnerModel.current_load > 0, PartnerModel.current_load - 1),
                    else_=0,
                )
            )
        )
        return result.rowcount == 1

    async def record_outcome(self, partner_id: str, delivered: bool) -> None:
        column = PartnerModel.completed_orders if delivered else PartnerModel.cancelled_orders
        await self._s.execute(
            update(PartnerModel)
            .where(PartnerModel.id == partner_id)
            .values({column: column + 1})
        )


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, assignment: Assignment) -> Assignment:
        assignment.created_at = assignment.created_at or utcnow()
        m = AssignmentModel(
            order_id=assignment.order_id,
            partner_id=assignment.partner_id,
            status=assignment.status.value,
            reason=assignment.reason,
            created_at=assignment.created_at,
        )
        self._s.add(m)
        await self._s.flush()
        assignment.id = m.id
        return assignment

    async def get_latest_for_order(self, order_id: str) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.order_id == order_id)
            .order_by(AssignmentModel.created_at.desc(), AssignmentModel.id.desc())
            .limit(1)
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def update(self, assignment: Assignment) -> Assignment:
        await self._s.execute(
            update(AssignmentModel)
            .where(AssignmentModel.id == assignment.id)
            .values(status=assignment.status.value, reason=assignment.reason)
        )
        await self._s.flush()
        return assignment

    async def list_failed(self) -> list[FailedAssignmentInfo]:
        result = await self._s.execute(
            select(AssignmentModel, OrderModel)
            .join(OrderModel, AssignmentModel.order_id == OrderModel.id)
            .where(AssignmentModel.status == AssignmentStatus.FAILED.value)
            .order_by(AssignmentModel.created_at.desc(), AssignmentModel.id.desc())
        )
        return [
            FailedAssignmentInfo(
                assignment_id=a.id,
                order_id=o.id,
                customer_name=o.customer_name,
                area=o.area,
                failure_reason=a.reason or "No reason provided",
                reported_at=a.created_at,
            )
            for a, o in result.all()
        ]

    async def get_metrics(self) -> AssignmentMetrics:
        status_rows = (
            await self._s.execute(
                select(AssignmentModel.status, func.count(AssignmentModel.id))
                .group_by(AssignmentModel.status)
            )
        ).all()
        by_status = {row[0]: row[1] for row in status_rows}

        reason_rows = (
            await self._s.execute(
                select(AssignmentModel.reason, func.count(AssignmentModel.id))
                .where(
                    AssignmentModel.status == AssignmentStatus.FAILED.value,
                    AssignmentModel.reason.is_not(None),
                )
                .group_by(AssignmentModel.reason)
                .order_by(func.count(AssignmentModel.id).desc(), AssignmentModel.reason)
            )
        ).all()

        return AssignmentMetrics(
            total_assignments=sum(by_status.values()),
            successful_assignments=by_status.get(AssignmentStatus.SUCCESS.value, 0),
            failed_assignments=by_status.get(AssignmentStatus.FAILED.value, 0),
            active_assignments=by_status.get(AssignmentStatus.ACTIVE.value, 0),
            failure_reasons=[(row[0], row[1]) for row in reason_rows],
        )


class SqlLoadAdjustmentRepository(LoadAdjustmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def enqueue(self, adjustment: LoadAdjustment) -> LoadAdjustment:
        m = LoadAdjustmentModel(
            partner_id=adjustment.partner_id,
            delta=adjustment.delta,
            reason=adjustment.reason,
            created_at=adjustment.created_at or utcnow(),
        )
        self._s.add(m)
        await self._s.flush()
        adjustment.id = m.id
        return adjustment

    async def get_pending(self) -> list[LoadAdjustment]:
        result = await self._s.execute(
            select(LoadAdjustmentModel)
            .where(LoadAdjustmentModel.applied_at.is_(None))
            .order_by(LoadAdjustmentModel.id)
        )
        return [_adjustment_to_domain(m) for m in result.scalars()]

    async def mark_applied(self, adjustment_id: int) -> None:
        await self._s.execute(
            update(LoadAdjustmentModel)
            .where(LoadAdjustmentModel.id == adjustment_id)
            .values(applied_at=func.now())
        )
