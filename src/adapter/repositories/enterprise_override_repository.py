"""SQLAlchemy Enterprise Override Repository Implementation"""

from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.enterprise_override_repository import EnterpriseOverrideRepository
from src.domain.enterprise_override import EnterpriseOverride


class SqlAlchemyEnterpriseOverrideRepository(EnterpriseOverrideRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_active(self, company_id: str, moment: datetime) -> Optional[EnterpriseOverride]:
        stmt = (
            select(EnterpriseOverride)
            .where(
                EnterpriseOverride.company_id == company_id,
                EnterpriseOverride.is_active == True,  # noqa: E712
                EnterpriseOverride.effective_from <= moment,
                or_(EnterpriseOverride.effective_to.is_(None), EnterpriseOverride.effective_to >= moment),
            )
            .order_by(EnterpriseOverride.effective_from.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, override: EnterpriseOverride) -> EnterpriseOverride:
        self.session.add(override)
        await self.session.flush()
        await self.session.refresh(override)
        return override
