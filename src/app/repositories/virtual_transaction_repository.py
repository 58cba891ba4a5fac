"""Virtual Transaction Repository Interface

Defines the contract for the append-only wallet ledger.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from src.domain.virtual_transaction import (
    VirtualTransaction,
    TransactionType,
    TransactionStatus,
)


class VirtualTransactionRepository(ABC):
    """
    Repository interface for VirtualTransaction persistence

    Entries are never deleted. Only the status fields of PENDING entries
    (withdrawals) are updated after creation.
    """

    @abstractmethod
    async def create(self, transaction: VirtualTransaction) -> VirtualTransaction:
        """
        Append a ledger entry

        Args:
            transaction: VirtualTransaction entity to persist

        Returns:
            Created VirtualTransaction
        """
        pass

    @abstractmethod
    async def update(self, transaction: VirtualTransaction) -> VirtualTransaction:
        pass

    @abstractmethod
    async def get_by_id(self, transaction_id: str, for_update: bool = False) -> Optional[VirtualTransaction]:
        """
        Retrieve entry by ID

        Args:
            transaction_id: Transaction identifier
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            VirtualTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_account(
        self,
        account_id: str,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[VirtualTransaction], int]:
        """
        List entries of an account, newest first

        Args:
            account_id: Account identifier
            transaction_type: Optional filter by entry type
            limit: Page size
            offset: Number of entries to skip

        Returns:
            Tuple of (page of entries, total matching count)
        """
        pass

    @abstractmethod
    async def list_by_type_and_status(
        self,
        transaction_type: TransactionType,
        status: TransactionStatus,
        limit: int = 50,
        offset: int = 0,
    ) -> List[VirtualTransaction]:
        pass

    @abstractmethod
    async def get_balance_components(self, account_id: str) -> Tuple[Decimal, Decimal]:
        """
        Sum the entries that make up the balance

        Counts COMPLETED entries plus PENDING debits (funds held for a
        withdrawal). FAILED entries are ignored.

        Returns:
            Tuple of (sum of credits, sum of debits)
        """
        pass

    @abstractmethod
    async def sum_completed_credits(self, account_id: str, since: Optional[datetime] = None) -> Decimal:
        pass

    @abstractmethod
    async def find_latest_by_reference(
        self,
        account_id: str,
        transaction_type: TransactionType,
        reference_type: str,
        reference_id: str,
    ) -> Optional[VirtualTransaction]:
        """Most recent COMPLETED entry of the given type for a referenced entity"""
        pass

    @abstractmethod
    async def exists_by_reference(
        self,
        transaction_types: Sequence[TransactionType],
        reference_type: str,
        reference_id: str,
    ) -> bool:
        pass
