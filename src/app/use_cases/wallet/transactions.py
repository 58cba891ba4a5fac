"""Transaction history use cases"""

from datetime import datetime, timedelta
from typing import Optional
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.domain.errors import AccountNotFoundError
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType
from .dtos import EarningsDTO, TransactionDTO, TransactionPageDTO


class ListTransactions:
    """
    List an owner's ledger entries, newest first

    Read-only. An owner without a wallet yet has no entries, which is
    reported as AccountNotFoundError rather than an empty page.
    """

    def __init__(self, account_repo: VirtualAccountRepository, transaction_repo: VirtualTransactionRepository):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(
        self,
        owner_type: AccountOwnerType,
        owner_id: str,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> TransactionPageDTO:
        account = await self.account_repo.get_by_owner(owner_type, owner_id)
        if not account:
            raise AccountNotFoundError(f"No virtual account for {owner_type.value} {owner_id}")

        entries, total = await self.transaction_repo.list_by_account(
            account.id, transaction_type=transaction_type, limit=limit, offset=offset
        )
        return TransactionPageDTO(
            transactions=[TransactionDTO.model_validate(entry) for entry in entries],
            total=total,
            limit=limit,
            offset=offset,
        )


class GetEarnings:
    """Completed credits of an owner's wallet, lifetime and last 30 days"""

    def __init__(self, account_repo: VirtualAccountRepository, transaction_repo: VirtualTransactionRepository):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self, owner_type: AccountOwnerType, owner_id: str) -> EarningsDTO:
        account = await self.account_repo.get_by_owner(owner_type, owner_id)
        if not account:
            raise AccountNotFoundError(f"No virtual account for {owner_type.value} {owner_id}")

        since = datetime.utcnow() - timedelta(days=30)
        total = await self.transaction_repo.sum_completed_credits(account.id)
        recent = await self.transaction_repo.sum_completed_credits(account.id, since=since)

        return EarningsDTO(
            account_id=account.id,
            owner_type=account.owner_type,
            owner_id=account.owner_id,
            total_earned=total,
            last_30_days=recent,
            available_balance=account.balance,
        )
