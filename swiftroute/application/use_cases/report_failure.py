"""ReportFailureUseCase — revert an order after a failed delivery attempt."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from swiftroute.application.ports.assignment_repo import AssignmentRepository
from swiftroute.application.ports.load_adjustment_repo import LoadAdjustmentRepository
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.transaction import TransactionPort
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.assignment import LoadAdjustment, validate_failure_reason
from swiftroute.domain.errors import (
    DispatchError,
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.value_objects.enums import AssignmentStatus, OrderStatus

logger = logging.getLogger(__name__)

QUEUED_WARNING = (
    "Order reverted, but the partner load counter could not be updated; "
    "the adjustment was queued for reconciliation."
)
UNQUEUED_WARNING = (
    "Order reverted, but the partner load counter could not be updated "
    "and the adjustment could not be queued; reconcile the partner load manually."
)


@dataclass
class FailureReport:
    order_id: str
    assignment_id: str
    partner_id: str | None
    warning: str | None = None


class ReportFailureUseCase:
    """Marks the latest assignment failed, reverts the order, releases the partner.

    The assignment and order updates commit together and are authoritative.
    The partner load release commits separately; if it fails the change is
    queued as a LoadAdjustment and the report still succeeds with a warning.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        partner_repo: PartnerRepository,
        assignment_repo: AssignmentRepository,
        adjustment_repo: LoadAdjustmentRepository,
        tx: TransactionPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._orders = order_repo
        self._partners = partner_repo
        self._assignments = assignment_repo
        self._adjustments = adjustment_repo
        self._tx = tx
        self._clock = clock

    async def execute(self, order_id: str, reason: str) -> FailureReport:
        reason = validate_failure_reason(reason)

        assignment = await self._assignments.get_latest_for_order(order_id)
        if assignment is None:
            raise NotFoundError(
                f"Could not find an assignment record for order ID {order_id} to update."
            )

        if assignment.status == AssignmentStatus.SUCCESS:
            raise ValidationError(f"Order {order_id} was already delivered; nothing to report.")

        order = await self._orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found for status revert.")
        if order.status in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            raise ValidationError(
                f"Order {order_id} is '{order.status.value}' and can no longer be reported as failed."
            )
        # A repeated report must not release the partner a second time.
        releases_partner = assignment.status == AssignmentStatus.ACTIVE and bool(assignment.partner_id)

        assignment.mark_failed(reason)
        try:
            await self._assignments.update(assignment)
            if not await self._orders.revert_to_pending(order_id):
                raise ValidationError(f"Order {order_id} was closed or removed concurrently.")
            await self._tx.commit()
        except DispatchError:
            await self._tx.rollback()
            raise
        except TimeoutError as e:
            await self._tx.rollback()
            raise UpstreamTimeoutError("Timed out recording the assignment failure.", detail=str(e)) from e
        except Exception as e:
            logger.exception("Error recording failure for order %s", order_id)
            await self._tx.rollback()
            raise UpstreamServiceError("Failed to record the assignment failure.", detail=str(e)) from e

        logger.info("Order %s reverted to pending (assignment %s failed)", order_id, assignment.id)

        warning = None
        if releases_partner:
            warning = await self._release_partner(assignment.partner_id, order_id)

        return FailureReport(
            order_id=order_id,
            assignment_id=assignment.id,
            partner_id=assignment.partner_id,
            warning=warning,
        )

    async def _release_partner(self, partner_id: str, order_id: str) -> str | None:
        try:
            found = await self._partners.decrement_load(partner_id)
            await self._tx.commit()
        except Exception:
            logger.exception("Load decrement failed for partner %s (order %s)", partner_id, order_id)
            await self._tx.rollback()
            return await self._queue_adjustment(partner_id, order_id)

        if not found:
            logger.warning("Partner %s vanished before its load could be released", partner_id)
            return f"Partner {partner_id} no longer exists; load counter not adjusted."
        return None

    async def _queue_adjustment(self, partner_id: str, order_id: str) -> str:
        adjustment = LoadAdjustment(
            id=None,
            partner_id=partner_id,
            delta=-1,
            reason=f"Failed delivery of order {order_id}",
            created_at=self._clock(),
        )
        try:
            await self._adjustments.enqueue(adjustment)
            await self._tx.commit()
        except Exception:
            logger.exception("Could not queue load adjustment for partner %s", partner_id)
            await self._tx.rollback()
            return UNQUEUED_WARNING
        return QUEUED_WARNING
