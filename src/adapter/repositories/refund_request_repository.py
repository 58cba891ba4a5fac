"""SQLAlchemy Refund Request Repository Implementation"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.refund_request_repository import RefundRequestRepository
from src.domain.refund_request import RefundRequest, RefundStatus


class SqlAlchemyRefundRequestRepository(RefundRequestRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, request: RefundRequest) -> RefundRequest:
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request)
        return request

    async def update(self, request: RefundRequest) -> RefundRequest:
        self.session.add(request)
        await self.session.flush()
        return request

    async def get_by_id(self, request_id: str, for_update: bool = False) -> Optional[RefundRequest]:
        stmt = select(RefundRequest).where(RefundRequest.id == request_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pending_for_transaction(self, transaction_id: str) -> Optional[RefundRequest]:
        stmt = select(RefundRequest).where(
            RefundRequest.transaction_id == transaction_id,
            RefundRequest.status == RefundStatus.PENDING,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list(
        self, company_id: Optional[str] = None, status: Optional[RefundStatus] = None
    ) -> List[RefundRequest]:
        stmt = select(RefundRequest)
        if company_id:
            stmt = stmt.where(RefundRequest.company_id == company_id)
        if status:
            stmt = stmt.where(RefundRequest.status == status)

        result = await self.session.execute(stmt.order_by(RefundRequest.created_at.desc()))
        return list(result.scalars().all())
