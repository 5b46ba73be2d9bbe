"""Port interface for the unit-of-work boundary shared by the repositories."""

from abc import ABC, abstractmethod


class TransactionPort(ABC):
    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
