"""Job Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.job import Job


class JobRepository(ABC):

    @abstractmethod
    async def get_by_id(self, job_id: str, for_update: bool = False) -> Optional[Job]:
        pass

    @abstractmethod
    async def update(self, job: Job) -> Job:
        pass
