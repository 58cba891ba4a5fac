"""SQLAlchemy Job Repository Implementation"""

from datetime import datetime
from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.job_repository import JobRepository
from src.domain.job import Job


class SqlAlchemyJobRepository(JobRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, job_id: str, for_update: bool = False) -> Optional[Job]:
        stmt = select(Job).where(Job.id == job_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, job: Job) -> Job:
        job.updated_at = datetime.utcnow()
        self.session.add(job)
        await self.session.flush()
        return job
