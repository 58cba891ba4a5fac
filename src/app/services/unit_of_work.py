"""Unit of Work Interface

Groups every repository write of one use case into a single database
transaction.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class UnitOfWork(ABC):

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """
        Execute work inside one transaction

        Commits when the closure returns, rolls back and re-raises when it
        raises. Nothing written by the closure is visible unless it completes.

        Args:
            work: Async callable performing the reads and writes

        Returns:
            Whatever the closure returned
        """
        try:
            result = await work()
        except BaseException:
            await self.rollback()
            raise
        await self.commit()
        return result
