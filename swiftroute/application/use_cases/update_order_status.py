"""UpdateOrderStatusUseCase — move an order through its lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from swiftroute.application.ports.assignment_repo import AssignmentRepository
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.transaction import TransactionPort
from swiftroute.application.use_cases.assign_order import AssignOrderUseCase
from swiftroute.domain.entities.order import Order
from swiftroute.domain.errors import (
    DispatchError,
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.policies.order_lifecycle import ensure_transition
from swiftroute.domain.value_objects.enums import AssignmentStatus, OrderStatus

logger = logging.getLogger(__name__)

CANCELLED_REASON = "Order cancelled before delivery"
REVERTED_REASON = "Order reverted to pending by operator"


@dataclass
class StatusChange:
    order: Order
    previous_status: OrderStatus


class UpdateOrderStatusUseCase:
    def __init__(
        self,
        order_repo: OrderRepository,
        partner_repo: PartnerRepository,
        assignment_repo: AssignmentRepository,
        tx: TransactionPort,
        assign_order: AssignOrderUseCase,
    ):
        self._orders = order_repo
        self._partners = partner_repo
        self._assignments = assignment_repo
        self._tx = tx
        self._assign = assign_order

    async def execute(
        self, order_id: str, new_status: OrderStatus, partner_id: str | None = None
    ) -> StatusChange:
        """Apply *new_status* to the order and keep partner/assignment state in step.

        Side effects:
          → assigned:  same path as AssignOrderUseCase (requires *partner_id*)
          → delivered: latest assignment success, partner load −1, completed +1
          → cancelled: partner cleared, assignment failed, load −1, cancelled +1
          → pending:   partner cleared, assignment failed, load −1
        """
        order = await self._orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")
        previous = order.status

        if new_status == previous and partner_id in (None, order.assigned_partner_id):
            return StatusChange(order=order, previous_status=previous)

        ensure_transition(previous, new_status)

        if new_status == OrderStatus.ASSIGNED:
            if not partner_id:
                raise ValidationError("assignedPartnerId is required to assign an order.")
            await self._assign.execute(order_id, partner_id)
            return StatusChange(order=await self._orders.get_by_id(order_id), previous_status=previous)

        if partner_id and partner_id != order.assigned_partner_id:
            raise ValidationError("Reassigning an order requires reverting it to pending first.")

        released_partner = order.assigned_partner_id if previous.is_open else None
        latest = None
        if previous.is_open:
            latest = await self._assignments.get_latest_for_order(order_id)
            if latest is not None and latest.status != AssignmentStatus.ACTIVE:
                latest = None

        if new_status == OrderStatus.PICKED:
            order.status = OrderStatus.PICKED
        elif new_status == OrderStatus.DELIVERED:
            order.status = OrderStatus.DELIVERED
            if latest:
                latest.mark_success()
        elif new_status == OrderStatus.CANCELLED:
            order.cancel()
            if latest:
                latest.mark_failed(CANCELLED_REASON)
        else:
            order.revert_to_pending()
            if latest:
                latest.mark_failed(REVERTED_REASON)

        try:
            await self._orders.update(order)
            if latest and new_status != OrderStatus.PICKED:
                await self._assignments.update(latest)
            if released_partner and new_status != OrderStatus.PICKED:
                await self._partners.decrement_load(released_partner)
                if new_status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
                    await self._partners.record_outcome(
                        released_partner, delivered=new_status == OrderStatus.DELIVERED
                    )
            await self._tx.commit()
        except DispatchError:
            await self._tx.rollback()
            raise
        except TimeoutError as e:
            await self._tx.rollback()
            raise UpstreamTimeoutError("Timed out updating order status.", detail=str(e)) from e
        except Exception as e:
            logger.exception("Error updating status of order %s", order_id)
            await self._tx.rollback()
            raise UpstreamServiceError("Error updating order status", detail=str(e)) from e

        logger.info("Order %s: %s → %s", order_id, previous.value, new_status.value)
        return StatusChange(order=order, previous_status=previous)
