"""SQLAlchemy Consultant Repository Implementation"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.consultant_repository import ConsultantRepository
from src.domain.consultant import Consultant


class SqlAlchemyConsultantRepository(ConsultantRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, consultant_id: str) -> Optional[Consultant]:
        result = await self.session.execute(select(Consultant).where(Consultant.id == consultant_id))
        return result.scalar_one_or_none()
