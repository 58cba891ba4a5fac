"""SQLAlchemy Company Repository Implementation"""

from datetime import datetime
from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.company_repository import CompanyRepository
from src.domain.company import Company


class SqlAlchemyCompanyRepository(CompanyRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, company_id: str, for_update: bool = False) -> Optional[Company]:
        stmt = select(Company).where(Company.id == company_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, company: Company) -> Company:
        company.updated_at = datetime.utcnow()
        self.session.add(company)
        await self.session.flush()
        return company
