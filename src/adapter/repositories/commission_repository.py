"""SQLAlchemy Commission Repository Implementation

Implements commission persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.commission_repository import CommissionRepository
from src.domain.commission import Commission, CommissionStatus, CommissionType

_DEAD_STATES = [CommissionStatus.CANCELLED, CommissionStatus.CLAWBACK]


class SqlAlchemyCommissionRepository(CommissionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, commission: Commission) -> Commission:
        self.session.add(commission)
        await self.session.flush()
        await self.session.refresh(commission)
        return commission

    async def update(self, commission: Commission) -> Commission:
        commission.updated_at = datetime.utcnow()
        self.session.add(commission)
        await self.session.flush()
        return commission

    async def get_by_id(self, commission_id: str, for_update: bool = False) -> Optional[Commission]:
        stmt = select(Commission).where(Commission.id == commission_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_live(
        self,
        consultant_id: str,
        commission_type: CommissionType,
        job_id: Optional[str],
        subscription_id: Optional[str],
    ) -> Optional[Commission]:
        stmt = select(Commission).where(
            Commission.consultant_id == consultant_id,
            Commission.type == commission_type,
            Commission.job_id == job_id if job_id else Commission.job_id.is_(None),
            Commission.subscription_id == subscription_id
            if subscription_id
            else Commission.subscription_id.is_(None),
            Commission.status.not_in(_DEAD_STATES),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list(
        self,
        consultant_id: Optional[str] = None,
        region_id: Optional[str] = None,
        status: Optional[CommissionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Commission], int]:
        conditions = []
        if consultant_id:
            conditions.append(Commission.consultant_id == consultant_id)
        if region_id:
            conditions.append(Commission.region_id == region_id)
        if status:
            conditions.append(Commission.status == status)

        total = (await self.session.execute(select(func.count(Commission.id)).where(*conditions))).scalar_one()

        stmt = (
            select(Commission)
            .where(*conditions)
            .order_by(Commission.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
