"""SQLAlchemy implementation of VirtualAccountRepository

Provides persistence for wallet accounts with pessimistic locking and
race-safe lazy creation.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.domain.virtual_account import VirtualAccount, AccountOwnerType

logger = logging.getLogger(__name__)


class SqlAlchemyVirtualAccountRepository(VirtualAccountRepository):
    """
    SQLAlchemy implementation of VirtualAccountRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Lazy creation guarded by the unique (owner_type, owner_id) constraint
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: str, for_update: bool = False) -> Optional[VirtualAccount]:
        stmt = select(VirtualAccount).where(VirtualAccount.id == account_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_owner(
        self, owner_type: AccountOwnerType, owner_id: str, for_update: bool = False
    ) -> Optional[VirtualAccount]:
        stmt = select(VirtualAccount).where(
            VirtualAccount.owner_type == owner_type,
            VirtualAccount.owner_id == owner_id,
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, owner_type: AccountOwnerType, owner_id: str) -> VirtualAccount:
        """
        Return the owner's account, creating it on first access

        The insert runs inside a savepoint so a unique-constraint violation
        from a concurrent creator only undoes the insert, not the caller's
        transaction.
        """
        account = await self.get_by_owner(owner_type, owner_id)
        if account:
            return account

        account = VirtualAccount(owner_type=owner_type, owner_id=owner_id)
        try:
            async with self.session.begin_nested():
                self.session.add(account)
                await self.session.flush()
        except IntegrityError:
            logger.info(f"Account for {owner_type.value}/{owner_id} created concurrently, re-reading")
            existing = await self.get_by_owner(owner_type, owner_id)
            if existing is None:
                raise
            return existing

        await self.session.refresh(account)
        logger.info(f"Created virtual account {account.id} for {owner_type.value}/{owner_id}")
        return account

    async def update(self, account: VirtualAccount) -> VirtualAccount:
        """
        Persist balance/counter changes

        Note:
            Should be called within a transaction with the account already locked
        """
        account.updated_at = datetime.utcnow()
        self.session.add(account)
        await self.session.flush()
        return account

    async def get_all(self) -> List[VirtualAccount]:
        result = await self.session.execute(select(VirtualAccount).order_by(VirtualAccount.created_at))
        return list(result.scalars().all())

    async def get_stats(self) -> Dict[str, Dict[str, object]]:
        stmt = select(
            VirtualAccount.owner_type,
            func.count(VirtualAccount.id),
            func.coalesce(func.sum(VirtualAccount.balance), 0),
            func.coalesce(func.sum(VirtualAccount.total_credits), 0),
            func.coalesce(func.sum(VirtualAccount.total_debits), 0),
        ).group_by(VirtualAccount.owner_type)
        result = await self.session.execute(stmt)

        stats: Dict[str, Dict[str, object]] = {}
        for owner_type, count, balance, credits, debits in result.all():
            key = owner_type.value if isinstance(owner_type, AccountOwnerType) else str(owner_type)
            stats[key] = {
                "count": count,
                "total_balance": Decimal(str(balance)),
                "total_credits": Decimal(str(credits)),
                "total_debits": Decimal(str(debits)),
            }
        return stats
