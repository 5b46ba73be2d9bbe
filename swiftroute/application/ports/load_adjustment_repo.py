"""Port interface for the pending partner-load adjustment queue."""

from abc import ABC, abstractmethod

from swiftroute.domain.entities.assignment import LoadAdjustment


class LoadAdjustmentRepository(ABC):
    @abstractmethod
    async def enqueue(self, adjustment: LoadAdjustment) -> LoadAdjustment:
        ...

    @abstractmethod
    async def get_pending(self) -> list[LoadAdjustment]:
        """Unapplied adjustments, oldest first."""
        ...

    @abstractmethod
    async def mark_applied(self, adjustment_id: int) -> None:
        ...
