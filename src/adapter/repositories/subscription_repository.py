"""SQLAlchemy Subscription Repository Implementation

Implements subscription persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.subscription import Subscription, SubscriptionStatus


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    SQLAlchemy implementation of SubscriptionRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, subscription_id: str, for_update: bool = False) -> Optional[Subscription]:
        statement = select(Subscription).where(Subscription.id == subscription_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_active_by_company(self, company_id: str, for_update: bool = False) -> Optional[Subscription]:
        """
        Retrieve the company's current subscription

        Args:
            company_id: Company identifier
            for_update: If True, lock the row (quota consumption)

        Returns:
            Most recently started ACTIVE subscription, None otherwise
        """
        statement = (
            select(Subscription)
            .where(
                Subscription.company_id == company_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .order_by(Subscription.start_date.desc())
            .limit(1)
        )

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def create(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: Subscription) -> Subscription:
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        await self.session.flush()
        return subscription
