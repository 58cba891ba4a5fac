"""SQLAlchemy Pricing Audit Log Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.pricing_audit_log_repository import PricingAuditLogRepository
from src.domain.pricing_audit_log import PricingAuditLog


class SqlAlchemyPricingAuditLogRepository(PricingAuditLogRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: PricingAuditLog) -> PricingAuditLog:
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def list_by_company(self, company_id: str) -> List[PricingAuditLog]:
        stmt = (
            select(PricingAuditLog)
            .where(PricingAuditLog.company_id == company_id)
            .order_by(PricingAuditLog.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
