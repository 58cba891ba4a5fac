"""Virtual Account Repository Interface

Defines the contract for wallet account persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from src.domain.virtual_account import VirtualAccount, AccountOwnerType


class VirtualAccountRepository(ABC):
    """
    Repository interface for VirtualAccount persistence

    Balance-changing callers must load the account with for_update=True
    (SELECT FOR UPDATE) so concurrent postings serialise on the row.
    """

    @abstractmethod
    async def get_by_id(self, account_id: str, for_update: bool = False) -> Optional[VirtualAccount]:
        """
        Retrieve account by ID

        Args:
            account_id: Account identifier
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            VirtualAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_owner(
        self, owner_type: AccountOwnerType, owner_id: str, for_update: bool = False
    ) -> Optional[VirtualAccount]:
        """
        Retrieve account by owner

        Args:
            owner_type: COMPANY, CONSULTANT or HRM8_GLOBAL
            owner_id: Owner identifier
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            VirtualAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_or_create(self, owner_type: AccountOwnerType, owner_id: str) -> VirtualAccount:
        """
        Return the owner's account, creating an empty ACTIVE one if missing

        Concurrent creators are settled by the (owner_type, owner_id) unique
        constraint; the loser re-reads the winner's row.
        """
        pass

    @abstractmethod
    async def update(self, account: VirtualAccount) -> VirtualAccount:
        pass

    @abstractmethod
    async def get_all(self) -> List[VirtualAccount]:
        pass

    @abstractmethod
    async def get_stats(self) -> Dict[str, Dict[str, object]]:
        """
        Aggregate accounts per owner type

        Returns:
            {owner_type: {"count", "total_balance", "total_credits", "total_debits"}}
        """
        pass
