"""Port interface for order-to-partner suggestion backends."""

from abc import ABC, abstractmethod

from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.entities.suggestion import Suggestion


class PartnerSuggester(ABC):
    @abstractmethod
    async def suggest(self, order: Order, candidates: list[Partner]) -> Suggestion:
        """Recommend one of *candidates* for *order*, or explain why none fits.

        Implementations never mutate orders, partners or assignments.

        Raises:
            UpstreamServiceError: the backing service failed or timed out.
            MalformedUpstreamResponse: the answer could not be parsed.
        """
        ...
