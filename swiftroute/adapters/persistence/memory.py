"""In-memory repositories — demo backend (STORAGE_BACKEND=memory) and test double.

All repositories of one InMemoryStore share a single snapshot: commit() freezes
the current state, rollback() restores the last committed one.  Entities are
copied on the way in and on the way out so callers never alias stored rows.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, replace

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
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.errors import ConflictError
from swiftroute.domain.value_objects.enums import AssignmentStatus, OrderStatus


@dataclass
class _State:
    orders: dict[str, Order] = field(default_factory=dict)
    partners: dict[str, Partner] = field(default_factory=dict)
    assignments: dict[str, Assignment] = field(default_factory=dict)
    adjustments: dict[int, LoadAdjustment] = field(default_factory=dict)
    next_adjustment_id: int = 1
    # Insertion counter used as a tie-breaker for equal timestamps.
    sequence: dict[str, int] = field(default_factory=dict)


class InMemoryStore:
    def __init__(self):
        self.state = _State()
        self._committed = _State()

    def next_sequence(self, key: str) -> int:
        seq = len(self.state.sequence)
        self.state.sequence[key] = seq
        return seq

    def commit(self) -> None:
        self._committed = copy.deepcopy(self.state)

    def rollback(self) -> None:
        self.state = copy.deepcopy(self._committed)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryTransaction(TransactionPort):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def commit(self) -> None:
        self._store.commit()

    async def rollback(self) -> None:
        self._store.rollback()


class InMemoryOrderRepository(OrderRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> dict[str, Order]:
        return self._store.state.orders

    async def save(self, order: Order) -> Order:
        order.id = order.id or _new_id()
        order.created_at = order.created_at or utcnow()
        self._rows[order.id] = copy.deepcopy(order)
        self._store.next_sequence(f"order:{order.id}")
        return order

    async def get_by_id(self, order_id: str) -> Order | None:
        row = self._rows.get(order_id)
        return copy.deepcopy(row) if row else None

    async def list(self, status: OrderStatus | None = None) -> list[Order]:
        rows = [o for o in self._rows.values() if status is None or o.status == status]
        seq = self._store.state.sequence
        rows.sort(key=lambda o: (o.created_at, seq.get(f"order:{o.id}", 0)), reverse=True)
        return [copy.deepcopy(o) for o in rows]

    async def update(self, order: Order) -> Order:
        if order.id in self._rows:
            self._rows[order.id] = replace(
                self._rows[order.id],
                status=order.status,
                assigned_partner_id=order.assigned_partner_id,
            )
        return order

    async def assign_if_pending(self, order_id: str, partner_id: str) -> bool:
        row = self._rows.get(order_id)
        if row is None or row.status != OrderStatus.PENDING:
            return False
        self._rows[order_id] = replace(
            row, status=OrderStatus.ASSIGNED, assigned_partner_id=partner_id
        )
        return True

    async def revert_to_pending(self, order_id: str) -> bool:
        row = self._rows.get(order_id)
        if row is None or row.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            return False
        self._rows[order_id] = replace(row, status=OrderStatus.PENDING, assigned_partner_id=None)
        return True


class InMemoryPartnerRepository(PartnerRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> dict[str, Partner]:
        return self._store.state.partners

    async def save(self, partner: Partner) -> Partner:
        partner.id = partner.id or _new_id()
        partner.created_at = partner.created_at or utcnow()
        self._rows[partner.id] = copy.deepcopy(partner)
        return partner

    async def get_by_id(self, partner_id: str) -> Partner | None:
        row = self._rows.get(partner_id)
        return copy.deepcopy(row) if row else None

    async def get_all(self) -> list[Partner]:
        rows = sorted(self._rows.values(), key=lambda p: (p.name, p.id))
        return [copy.deepcopy(p) for p in rows]

    async def update(self, partner: Partner) -> Partner:
        if partner.id in self._rows:
            self._rows[partner.id] = copy.deepcopy(partner)
        return partner

    async def delete(self, partner_id: str) -> bool:
        if partner_id not in self._rows:
            return False
        state = self._store.state
        referenced = any(
            o.assigned_partner_id == partner_id for o in state.orders.values()
        ) or any(a.partner_id == partner_id for a in state.assignments.values())
        if referenced:
            raise ConflictError(
                f"Failed to delete partner {partner_id[:8]}... because they are still referenced "
                "in other records (e.g., assigned orders). Please reassign or complete their orders first.",
                detail="Foreign key constraint violation",
            )
        del self._rows[partner_id]
        return True

    async def increment_load_if_below(self, partner_id: str, ceiling: int) -> bool:
        row = self._rows.get(partner_id)
        if row is None or row.current_load >= ceiling:
            return False
        self._rows[partner_id] = replace(row, current_load=row.current_load + 1)
        return True

    async def decrement_load(self, partner_id: str) -> bool:
        row = self._rows.get(partner_id)
        if row is None:
            return False
        self._rows[partner_id] = replace(row, current_load=max(0, row.current_load - 1))
        return True

    async def record_outcome(self, partner_id: str, delivered: bool) -> None:
        row = self._rows.get(partner_id)
        if row is None:
            return
        if delivered:
            self._rows[partner_id] = replace(row, completed_orders=row.completed_orders + 1)
        else:
            self._rows[partner_id] = replace(row, cancelled_orders=row.cancelled_orders + 1)


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    @property
    def _rows(self) -> dict[str, Assignment]:
        return self._store.state.assignments

    def _sort_key(self, a: Assignment):
        return (a.created_at, self._store.state.sequence.get(f"assignment:{a.id}", 0))

    async def save(self, assignment: Assignment) -> Assignment:
        assignment.id = assignment.id or _new_id()
        assignment.created_at = assignment.created_at or utcnow()
        self._rows[assignment.id] = copy.deepcopy(assignment)
        self._store.next_sequence(f"assignment:{assignment.id}")
        return assignment

    async def get_latest_for_order(self, order_id: str) -> Assignment | None:
        rows = [a for a in self._rows.values() if a.order_id == order_id]
        if not rows:
            return None
        return copy.deepcopy(max(rows, key=self._sort_key))

    async def update(self, assignment: Assignment) -> Assignment:
        if assignment.id in self._rows:
            self._rows[assignment.id] = replace(
                self._rows[assignment.id], status=assignment.status, reason=assignment.reason
            )
        return assignment

    async def list_failed(self) -> list[FailedAssignmentInfo]:
        orders = self._store.state.orders
        failed = [
            a for a in self._rows.values()
            if a.status == AssignmentStatus.FAILED and a.order_id in orders
        ]
        failed.sort(key=self._sort_key, reverse=True)
        return [
            FailedAssignmentInfo(
                assignment_id=a.id,
                order_id=a.order_id,
                customer_name=orders[a.order_id].customer_name,
                area=orders[a.order_id].area,
                failure_reason=a.reason or "No reason provided",
                reported_at=a.created_at,
            )
            for a in failed
        ]

    async def get_metrics(self) -> AssignmentMetrics:
        rows = list(self._rows.values())
        counts: dict[str, int] = {}
        for a in rows:
            if a.status == AssignmentStatus.FAILED and a.reason:
                counts[a.reason] = counts.get(a.reason, 0) + 1
        return AssignmentMetrics(
            total_assignments=len(rows),
            successful_assignments=sum(1 for a in rows if a.status == AssignmentStatus.SUCCESS),
            failed_assignments=sum(1 for a in rows if a.status == AssignmentStatus.FAILED),
            active_assignments=sum(1 for a in rows if a.status == AssignmentStatus.ACTIVE),
            failure_reasons=sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])),
        )


class InMemoryLoadAdjustmentRepository(LoadAdjustmentRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def enqueue(self, adjustment: LoadAdjustment) -> LoadAdjustment:
        state = self._store.state
        adjustment.id = state.next_adjustment_id
        adjustment.created_at = adjustment.created_at or utcnow()
        state.next_adjustment_id += 1
        state.adjustments[adjustment.id] = copy.deepcopy(adjustment)
        return adjustment

    async def get_pending(self) -> list[LoadAdjustment]:
        rows = self._store.state.adjustments
        return [copy.deepcopy(rows[k]) for k in sorted(rows) if rows[k].applied_at is None]

    async def mark_applied(self, adjustment_id: int) -> None:
        rows = self._store.state.adjustments
        if adjustment_id in rows:
            rows[adjustment_id] = replace(rows[adjustment_id], applied_at=utcnow())
