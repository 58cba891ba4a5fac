"""Account Use Cases

Lazy account creation and the two posting primitives, each wrapped in its
own unit of work.
"""

import logging
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.services.ledger import VirtualLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.virtual_account import AccountOwnerType
from .dtos import AccountDTO, BalanceDTO, PostingCommandDTO, TransactionDTO

logger = logging.getLogger(__name__)


class GetOrCreateAccount:
    """
    Use Case: Fetch the wallet of an owner, creating it on first access

    Concurrent first accesses end with one account: the loser of the
    (owner_type, owner_id) unique constraint re-reads the winner's row.
    """

    def __init__(self, uow: UnitOfWork, account_repo: VirtualAccountRepository):
        self.uow = uow
        self.account_repo = account_repo

    async def execute(self, owner_type: AccountOwnerType, owner_id: str) -> AccountDTO:
        async def work():
            return await self.account_repo.get_or_create(owner_type, owner_id)

        account = await self.uow.run(work)
        return AccountDTO.model_validate(account)


class CreditAccount:
    """
    Use Case: Add funds to an account

    Business Rules:
    1. Amount must be > 0
    2. Entry and balance update commit together or not at all
    3. A company credit carrying a billing currency locks the company currency
    """

    def __init__(self, uow: UnitOfWork, ledger: VirtualLedger):
        self.uow = uow
        self.ledger = ledger

    async def execute(self, command: PostingCommandDTO) -> TransactionDTO:
        async def work():
            return await self.ledger.post_credit(
                command.account_id, command.amount, command.transaction_type, command.context
            )

        entry = await self.uow.run(work)
        return TransactionDTO.model_validate(entry)


class DebitAccount:
    """
    Use Case: Take funds from an account

    Business Rules:
    1. Amount must be > 0
    2. Company debits in a currency are checked against the currency lock first
    3. The balance never goes below zero (InsufficientBalanceError carries the shortfall)
    4. The first successful company debit locks the company currency

    Flow:
    1. Lock account row (SELECT FOR UPDATE)
    2. Validate currency lock
    3. Validate sufficient balance
    4. Append DEBIT entry and update account
    5. Commit (rollback on any failure)
    """

    def __init__(self, uow: UnitOfWork, ledger: VirtualLedger):
        self.uow = uow
        self.ledger = ledger

    async def execute(self, command: PostingCommandDTO) -> TransactionDTO:
        async def work():
            return await self.ledger.post_debit(
                command.account_id, command.amount, command.transaction_type, command.context
            )

        entry = await self.uow.run(work)
        return TransactionDTO.model_validate(entry)


class GetBalance:
    """
    Use Case: Current balance and lifetime counters of an owner's wallet

    Company wallets report the company's billing currency; every other
    owner (and a company without one) reports the default currency.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: VirtualAccountRepository,
        company_repo: CompanyRepository,
        default_currency: str = "USD",
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.company_repo = company_repo
        self.default_currency = default_currency

    async def execute(self, owner_type: AccountOwnerType, owner_id: str) -> BalanceDTO:
        async def work():
            return await self.account_repo.get_or_create(owner_type, owner_id)

        account = await self.uow.run(work)

        currency = self.default_currency
        if owner_type == AccountOwnerType.COMPANY:
            company = await self.company_repo.get_by_id(owner_id)
            if company and company.billing_currency:
                currency = company.billing_currency

        return BalanceDTO(
            account_id=account.id,
            owner_type=account.owner_type,
            owner_id=account.owner_id,
            balance=account.balance,
            total_credits=account.total_credits,
            total_debits=account.total_debits,
            currency=currency,
            status=account.status,
        )
