"""Port interface for assignment history persistence."""

from abc import ABC, abstractmethod

from swiftroute.domain.entities.assignment import (
    Assignment,
    AssignmentMetrics,
    FailedAssignmentInfo,
)


class AssignmentRepository(ABC):
    @abstractmethod
    async def save(self, assignment: Assignment) -> Assignment:
        ...

    @abstractmethod
    async def get_latest_for_order(self, order_id: str) -> Assignment | None:
        """Most recent assignment of the order by created_at."""
        ...

    @abstractmethod
    async def update(self, assignment: Assignment) -> Assignment:
        """Persist status and reason of an existing assignment."""
        ...

    @abstractmethod
    async def list_failed(self) -> list[FailedAssignmentInfo]:
        """Failed assignments joined with their order, newest first."""
        ...

    @abstractmethod
    async def get_metrics(self) -> AssignmentMetrics:
        ...
