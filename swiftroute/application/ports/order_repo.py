"""Port interface for order persistence."""

from abc import ABC, abstractmethod

from swiftroute.domain.entities.order import Order
from swiftroute.domain.value_objects.enums import OrderStatus


class OrderRepository(ABC):
    @abstractmethod
    async def save(self, order: Order) -> Order:
        ...

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Order | None:
        ...

    @abstractmethod
    async def list(self, status: OrderStatus | None = None) -> list[Order]:
        """Return orders newest first, optionally filtered by status."""
        ...

    @abstractmethod
    async def update(self, order: Order) -> Order:
        """Persist status and assigned partner of an existing order."""
        ...

    @abstractmethod
    async def assign_if_pending(self, order_id: str, partner_id: str) -> bool:
        """Conditionally move a PENDING order to ASSIGNED.

        Returns False if the order is missing or no longer pending.
        """
        ...

    @abstractmethod
    async def revert_to_pending(self, order_id: str) -> bool:
        """Set status PENDING and clear the partner. False if the order is missing or closed."""
        ...
