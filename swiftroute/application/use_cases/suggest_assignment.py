"""SuggestAssignmentUseCase — recommend a partner for one order."""

from __future__ import annotations

import logging

from swiftroute.application.ports.suggester_port import PartnerSuggester
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import MAX_CONCURRENT_ORDERS, Partner
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.errors import MalformedUpstreamResponse

logger = logging.getLogger(__name__)

NO_ACTIVE_PARTNERS_REASON = "No active partners are currently available for assignment."


class SuggestAssignmentUseCase:
    """Filters candidates, delegates to a suggester and vets its answer."""

    def __init__(self, suggester: PartnerSuggester, ceiling: int = MAX_CONCURRENT_ORDERS):
        self._suggester = suggester
        self._ceiling = ceiling

    async def execute(self, order: Order, partners: list[Partner]) -> Suggestion:
        """Return a suggestion for *order* among the active *partners*.

        The result is advisory: nothing is persisted here.

        Raises:
            UpstreamServiceError: the suggestion backend failed.
            MalformedUpstreamResponse: the backend picked an unknown or
                over-capacity partner, or answered in an unexpected shape.
        """
        active = [p for p in partners if p.is_active()]
        if not active:
            logger.info("Order %s: no active partners, skipping suggestion", order.id)
            return Suggestion.none(NO_ACTIVE_PARTNERS_REASON)

        suggestion = await self._suggester.suggest(order, active)

        if suggestion.suggestion_made:
            by_id = {p.id: p for p in active}
            chosen = by_id.get(suggestion.suggested_partner_id)
            if chosen is None:
                raise MalformedUpstreamResponse(
                    f"Suggested partner {suggestion.suggested_partner_id!r} "
                    "is not among the active candidates."
                )
            if not chosen.has_capacity(self._ceiling):
                raise MalformedUpstreamResponse(
                    f"Suggested partner {chosen.name} is at maximum load "
                    f"({chosen.current_load}/{self._ceiling})."
                )

        logger.info(
            "Order %s: suggestion_made=%s partner=%s source=%s",
            order.id, suggestion.suggestion_made,
            suggestion.suggested_partner_id, suggestion.source,
        )
        return suggestion
