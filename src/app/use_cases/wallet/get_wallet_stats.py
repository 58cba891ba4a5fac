"""Get Wallet Stats Use Case

Admin overview of every wallet, grouped by owner type.
"""

from decimal import Decimal
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.domain.virtual_transaction import TransactionStatus, TransactionType
from .dtos import OwnerTypeStatsDTO, WalletStatsDTO

# Upper bound of pending withdrawals summed into the overview
PENDING_SCAN_LIMIT = 1000


class GetWalletStats:

    def __init__(self, account_repo: VirtualAccountRepository, transaction_repo: VirtualTransactionRepository):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self) -> WalletStatsDTO:
        stats = await self.account_repo.get_stats()
        by_owner_type = {key: OwnerTypeStatsDTO(**values) for key, values in stats.items()}

        pending = await self.transaction_repo.list_by_type_and_status(
            TransactionType.COMMISSION_WITHDRAWAL, TransactionStatus.PENDING, limit=PENDING_SCAN_LIMIT
        )

        return WalletStatsDTO(
            total_accounts=sum(item.count for item in by_owner_type.values()),
            total_balance=sum((item.total_balance for item in by_owner_type.values()), Decimal("0")),
            by_owner_type=by_owner_type,
            pending_withdrawals=len(pending),
            pending_withdrawal_amount=sum((entry.amount for entry in pending), Decimal("0")),
        )
