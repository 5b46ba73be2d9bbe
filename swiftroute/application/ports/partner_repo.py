"""Port interface for delivery partner persistence."""

from abc import ABC, abstractmethod

from swiftroute.domain.entities.partner import Partner


class PartnerRepository(ABC):
    @abstractmethod
    async def save(self, partner: Partner) -> Partner:
        ...

    @abstractmethod
    async def get_by_id(self, partner_id: str) -> Partner | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[Partner]:
        """Return all partners sorted by name."""
        ...

    @abstractmethod
    async def update(self, partner: Partner) -> Partner:
        ...

    @abstractmethod
    async def delete(self, partner_id: str) -> bool:
        """Delete a partner. False if missing; ConflictError if still referenced."""
        ...

    @abstractmethod
    async def increment_load_if_below(self, partner_id: str, ceiling: int) -> bool:
        """Atomically add one open delivery unless the partner is at *ceiling*."""
        ...

    @abstractmethod
    async def decrement_load(self, partner_id: str) -> bool:
        """Atomically remove one open delivery, floored at zero.

        Returns False if the partner does not exist.
        """
        ...

    @abstractmethod
    async def record_outcome(self, partner_id: str, delivered: bool) -> None:
        """Bump completed_orders (delivered) or cancelled_orders."""
        ...
