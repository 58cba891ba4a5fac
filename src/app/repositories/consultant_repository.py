"""Consultant Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.consultant import Consultant


class ConsultantRepository(ABC):

    @abstractmethod
    async def get_by_id(self, consultant_id: str) -> Optional[Consultant]:
        pass
