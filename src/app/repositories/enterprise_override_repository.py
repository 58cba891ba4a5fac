"""Enterprise Override Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from src.domain.enterprise_override import EnterpriseOverride


class EnterpriseOverrideRepository(ABC):

    @abstractmethod
    async def find_active(self, company_id: str, moment: datetime) -> Optional[EnterpriseOverride]:
        """
        Active override for a company

        Args:
            company_id: Company identifier
            moment: Point in time inside effective_from..effective_to (open end allowed)

        Returns:
            The most recently started override, None if there is none
        """
        pass

    @abstractmethod
    async def create(self, override: EnterpriseOverride) -> EnterpriseOverride:
        pass
