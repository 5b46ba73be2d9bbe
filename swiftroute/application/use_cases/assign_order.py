"""AssignOrderUseCase — commit an order to a partner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from swiftroute.application.ports.assignment_repo import AssignmentRepository
from swiftroute.application.ports.order_repo import OrderRepository
from swiftroute.application.ports.partner_repo import PartnerRepository
from swiftroute.application.ports.transaction import TransactionPort
from swiftroute.application.use_cases.suggest_assignment import SuggestAssignmentUseCase
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.assignment import Assignment
from swiftroute.domain.entities.partner import MAX_CONCURRENT_ORDERS
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.errors import (
    ConfigurationError,
    DispatchError,
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.value_objects.enums import AssignmentStatus, OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class AssignmentOutcome:
    """Summary of one assign attempt."""

    order_id: str
    committed: bool
    partner_id: str | None = None
    assignment_id: str | None = None
    suggestion: Suggestion | None = None


class AssignOrderUseCase:
    """Creates the assignment record, marks the order assigned, bumps partner load."""

    def __init__(
        self,
        order_repo: OrderRepository,
        partner_repo: PartnerRepository,
        assignment_repo: AssignmentRepository,
        tx: TransactionPort,
        suggest: SuggestAssignmentUseCase | None = None,
        clock: Callable[[], datetime] = utcnow,
        ceiling: int = MAX_CONCURRENT_ORDERS,
    ):
        self._orders = order_repo
        self._partners = partner_repo
        self._assignments = assignment_repo
        self._tx = tx
        self._suggest = suggest
        self._clock = clock
        self._ceiling = ceiling

    async def execute(self, order_id: str, partner_id: str | None = None) -> AssignmentOutcome:
        """Assign *order_id* to *partner_id*, or to the suggested partner if omitted.

        Pipeline:
        1. Load the order; it must be pending
        2. Resolve the partner (explicit, or via the suggestion use case)
        3. Check the partner is active and below the capacity ceiling
        4. Conditionally flip the order and bump the load in one transaction
        5. Record the assignment
        """
        order = await self._orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")
        if order.status != OrderStatus.PENDING:
            raise ValidationError(
                f"Order {order_id} is '{order.status.value}', only pending orders can be assigned."
            )

        suggestion = None
        if partner_id is None:
            if self._suggest is None:
                raise ConfigurationError(
                    "Server configuration error: no suggestion backend is available; pass partnerId."
                )
            suggestion = await self._suggest.execute(order, await self._partners.get_all())
            if not suggestion.suggestion_made:
                return AssignmentOutcome(order_id=order_id, committed=False, suggestion=suggestion)
            partner_id = suggestion.suggested_partner_id

        partner = await self._partners.get_by_id(partner_id)
        if partner is None:
            raise NotFoundError(f"Partner with ID {partner_id} not found")
        if not partner.is_active():
            raise ValidationError(f"Partner {partner.name} is '{partner.status.value}', not active.")
        if not partner.has_capacity(self._ceiling):
            raise ValidationError(
                f"Partner {partner.name} is at maximum load ({partner.current_load}/{self._ceiling})."
            )

        assignment = Assignment(
            id=None,
            order_id=order_id,
            partner_id=partner_id,
            status=AssignmentStatus.ACTIVE,
            created_at=self._clock(),
        )
        try:
            if not await self._orders.assign_if_pending(order_id, partner_id):
                raise ValidationError(f"Order {order_id} was modified concurrently and is no longer pending.")
            if not await self._partners.increment_load_if_below(partner_id, self._ceiling):
                raise ValidationError(f"Partner {partner.name} reached maximum load.")
            await self._assignments.save(assignment)
            await self._tx.commit()
        except DispatchError:
            await self._tx.rollback()
            raise
        except TimeoutError as e:
            await self._tx.rollback()
            raise UpstreamTimeoutError("Timed out persisting the assignment.", detail=str(e)) from e
        except Exception as e:
            logger.exception("Error assigning order %s to partner %s", order_id, partner_id)
            await self._tx.rollback()
            raise UpstreamServiceError("Failed to persist the assignment.", detail=str(e)) from e

        logger.info("Order %s → Partner %s (assignment %s)", order_id, partner.name, assignment.id)
        return AssignmentOutcome(
            order_id=order_id,
            committed=True,
            partner_id=partner_id,
            assignment_id=assignment.id,
            suggestion=suggestion,
        )
