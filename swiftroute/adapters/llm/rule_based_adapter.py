"""Deterministic suggester — no network, used for tests and as the offline backend."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from swiftroute.application.ports.suggester_port import PartnerSuggester
from swiftroute.domain.clock import utcnow
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import MAX_CONCURRENT_ORDERS, Partner
from swiftroute.domain.entities.suggestion import Suggestion
from swiftroute.domain.policies.partner_selection import select_partner


class RuleBasedSuggester(PartnerSuggester):
    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        ceiling: int = MAX_CONCURRENT_ORDERS,
    ):
        self._clock = clock
        self._ceiling = ceiling

    async def suggest(self, order: Order, candidates: list[Partner]) -> Suggestion:
        return select_partner(order, candidates, self._clock().time(), self._ceiling)
