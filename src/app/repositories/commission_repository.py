"""Commission Repository Interface

Defines the contract for commission persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from src.domain.commission import Commission, CommissionStatus, CommissionType


class CommissionRepository(ABC):

    @abstractmethod
    async def create(self, commission: Commission) -> Commission:
        pass

    @abstractmethod
    async def update(self, commission: Commission) -> Commission:
        pass

    @abstractmethod
    async def get_by_id(self, commission_id: str, for_update: bool = False) -> Optional[Commission]:
        """
        Retrieve commission by ID

        Args:
            commission_id: Commission identifier
            for_update: If True, lock the row for the duration of a transition

        Returns:
            Commission if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_live(
        self,
        consultant_id: str,
        commission_type: CommissionType,
        job_id: Optional[str],
        subscription_id: Optional[str],
    ) -> Optional[Commission]:
        """
        Existing commission for the same source that was not cancelled or clawed back

        Used to keep award idempotent per (consultant, type, job, subscription).
        """
        pass

    @abstractmethod
    async def list(
        self,
        consultant_id: Optional[str] = None,
        region_id: Optional[str] = None,
        status: Optional[CommissionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Commission], int]:
        """
        List commissions, newest first

        Returns:
            Tuple of (page of commissions, total matching count)
        """
        pass
