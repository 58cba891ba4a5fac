"""SQLAlchemy implementation of VirtualTransactionRepository

Append-only persistence for wallet ledger entries plus the aggregate
queries used by balance reads and reconciliation.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import and_, case, func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.domain.virtual_transaction import (
    VirtualTransaction,
    TransactionType,
    TransactionDirection,
    TransactionStatus,
)


def _to_decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


class SqlAlchemyVirtualTransactionRepository(VirtualTransactionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: VirtualTransaction) -> VirtualTransaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def update(self, transaction: VirtualTransaction) -> VirtualTransaction:
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def get_by_id(self, transaction_id: str, for_update: bool = False) -> Optional[VirtualTransaction]:
        stmt = select(VirtualTransaction).where(VirtualTransaction.id == transaction_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_account(
        self,
        account_id: str,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[VirtualTransaction], int]:
        conditions = [VirtualTransaction.virtual_account_id == account_id]
        if transaction_type:
            conditions.append(VirtualTransaction.type == transaction_type)

        count_stmt = select(func.count(VirtualTransaction.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(VirtualTransaction)
            .where(*conditions)
            .order_by(VirtualTransaction.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_by_type_and_status(
        self,
        transaction_type: TransactionType,
        status: TransactionStatus,
        limit: int = 50,
        offset: int = 0,
    ) -> List[VirtualTransaction]:
        stmt = (
            select(VirtualTransaction)
            .where(
                VirtualTransaction.type == transaction_type,
                VirtualTransaction.status == status,
            )
            .order_by(VirtualTransaction.created_at)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_balance_components(self, account_id: str) -> Tuple[Decimal, Decimal]:
        """
        Sum credits and debits that back the current balance

        PENDING debits are withdrawals whose funds are already held, so they
        count. FAILED entries were compensated and are skipped.
        """
        is_credit = VirtualTransaction.direction == TransactionDirection.CREDIT
        is_debit = VirtualTransaction.direction == TransactionDirection.DEBIT
        counted = or_(
            VirtualTransaction.status == TransactionStatus.COMPLETED,
            and_(is_debit, VirtualTransaction.status == TransactionStatus.PENDING),
        )

        stmt = select(
            func.coalesce(func.sum(case((is_credit, VirtualTransaction.amount), else_=0)), 0),
            func.coalesce(func.sum(case((is_debit, VirtualTransaction.amount), else_=0)), 0),
        ).where(VirtualTransaction.virtual_account_id == account_id, counted)

        credits, debits = (await self.session.execute(stmt)).one()
        return _to_decimal(credits), _to_decimal(debits)

    async def sum_completed_credits(self, account_id: str, since: Optional[datetime] = None) -> Decimal:
        stmt = select(func.coalesce(func.sum(VirtualTransaction.amount), 0)).where(
            VirtualTransaction.virtual_account_id == account_id,
            VirtualTransaction.direction == TransactionDirection.CREDIT,
            VirtualTransaction.status == TransactionStatus.COMPLETED,
        )
        if since:
            stmt = stmt.where(VirtualTransaction.created_at >= since)

        return _to_decimal((await self.session.execute(stmt)).scalar_one())

    async def find_latest_by_reference(
        self,
        account_id: str,
        transaction_type: TransactionType,
        reference_type: str,
        reference_id: str,
    ) -> Optional[VirtualTransaction]:
        stmt = (
            select(VirtualTransaction)
            .where(
                VirtualTransaction.virtual_account_id == account_id,
                VirtualTransaction.type == transaction_type,
                VirtualTransaction.reference_type == reference_type,
                VirtualTransaction.reference_id == reference_id,
                VirtualTransaction.status == TransactionStatus.COMPLETED,
            )
            .order_by(VirtualTransaction.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_by_reference(
        self,
        transaction_types: Sequence[TransactionType],
        reference_type: str,
        reference_id: str,
    ) -> bool:
        stmt = select(func.count(VirtualTransaction.id)).where(
            VirtualTransaction.type.in_(list(transaction_types)),
            VirtualTransaction.reference_type == reference_type,
            VirtualTransaction.reference_id == reference_id,
        )
        return (await self.session.execute(stmt)).scalar_one() > 0
