"""Virtual Ledger

Credit and debit postings against wallet accounts. Every posting runs
inside the caller's unit of work and starts by locking the account row,
so the balance check, the ledger entry and the account update form one
atomic step.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.app.services.currency_assignment import CurrencyAssignmentService
from src.domain.errors import (
    AccountInactiveError,
    AccountNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidStateTransitionError,
    TransactionNotFoundError,
)
from src.domain.money import to_money
from src.domain.transaction_metadata import TransactionMetadata
from src.domain.virtual_account import VirtualAccount, AccountOwnerType
from src.domain.virtual_transaction import (
    VirtualTransaction,
    TransactionType,
    TransactionDirection,
    TransactionStatus,
)

logger = logging.getLogger(__name__)


class PostingContext(BaseModel):
    """What a posting refers to and the pricing it was computed with"""

    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[str] = None
    pricing_peg: Optional[str] = None
    billing_currency: Optional[str] = None
    price_book_id: Optional[str] = None
    price_book_version: Optional[str] = None
    override_id: Optional[str] = None
    details: Optional[TransactionMetadata] = None


class VirtualLedger:
    """
    Ledger postings

    Business Rules:
    1. Amount must be > 0 (rounded to cents)
    2. The account row is locked (SELECT FOR UPDATE) before it is read
    3. Company debits in a currency are validated against the currency lock
       before the balance is touched; credits are never refused for currency
    4. A debit never takes the balance below zero
    5. The first company posting in a currency locks the company currency
    6. total_credits / total_debits only grow
    """

    def __init__(
        self,
        account_repo: VirtualAccountRepository,
        transaction_repo: VirtualTransactionRepository,
        currency_service: CurrencyAssignmentService,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.currency_service = currency_service

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        value = to_money(amount)
        if value <= 0:
            raise InvalidAmountError(f"Amount must be greater than 0, got {amount}")
        return value

    async def _lock_account(self, account_id: str) -> VirtualAccount:
        account = await self.account_repo.get_by_id(account_id, for_update=True)
        if not account:
            raise AccountNotFoundError(f"Virtual account {account_id} not found")
        if not account.is_active:
            raise AccountInactiveError(f"Virtual account {account_id} is not active")
        return account

    def _build_entry(
        self,
        account: VirtualAccount,
        amount: Decimal,
        transaction_type: TransactionType,
        direction: TransactionDirection,
        status: TransactionStatus,
        context: PostingContext,
    ) -> VirtualTransaction:
        entry = VirtualTransaction(
            virtual_account_id=account.id,
            type=transaction_type,
            amount=amount,
            direction=direction,
            balance_after=account.balance,
            status=status,
            description=context.description,
            reference_type=context.reference_type,
            reference_id=context.reference_id,
            created_by=context.created_by,
            pricing_peg_used=context.pricing_peg,
            billing_currency_used=context.billing_currency,
            price_book_id=context.price_book_id,
            price_book_version=context.price_book_version,
            override_id=context.override_id,
        )
        entry.attach_details(context.details)
        return entry

    async def post_credit(
        self,
        account_id: str,
        amount,
        transaction_type: TransactionType,
        context: Optional[PostingContext] = None,
    ) -> VirtualTransaction:
        """
        Add funds to an account

        Args:
            account_id: Account to credit
            amount: Positive amount
            transaction_type: Ledger entry type
            context: Reference and pricing metadata

        Returns:
            The COMPLETED CREDIT entry

        Raises:
            InvalidAmountError, AccountNotFoundError, AccountInactiveError
        """
        context = context or PostingContext()
        value = self._validate_amount(amount)

        # Step 1: Lock account
        account = await self._lock_account(account_id)

        # Step 2: Lock company currency (no-op when already locked)
        if account.owner_type == AccountOwnerType.COMPANY and context.billing_currency:
            await self.currency_service.lock_currency(account.owner_id)

        # Step 3: Move balance and append entry
        account.balance = account.balance + value
        account.total_credits = account.total_credits + value
        entry = self._build_entry(
            account, value, transaction_type, TransactionDirection.CREDIT, TransactionStatus.COMPLETED, context
        )
        entry = await self.transaction_repo.create(entry)
        await self.account_repo.update(account)

        logger.info(
            f"Credited {value} to account {account.id} ({transaction_type.value}), "
            f"balance_after={account.balance}"
        )
        return entry

    async def post_debit(
        self,
        account_id: str,
        amount,
        transaction_type: TransactionType,
        context: Optional[PostingContext] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
    ) -> VirtualTransaction:
        """
        Take funds from an account

        A PENDING status holds the funds (withdrawals): the balance moves now
        and the entry is settled later with complete_pending/fail_pending.

        Raises:
            InvalidAmountError, AccountNotFoundError, AccountInactiveError,
            CurrencyMismatchError, InsufficientBalanceError
        """
        context = context or PostingContext()
        value = self._validate_amount(amount)

        # Step 1: Lock account
        account = await self._lock_account(account_id)
        is_company_charge = account.owner_type == AccountOwnerType.COMPANY and bool(context.billing_currency)

        # Step 2: Currency lock must match before touching the balance
        if is_company_charge:
            await self.currency_service.validate_currency_lock(account.owner_id, context.billing_currency)

        # Step 3: Sufficient balance
        if account.balance < value:
            raise InsufficientBalanceError(value, account.balance, currency=context.billing_currency)

        # Step 4: First successful company charge locks the currency
        if is_company_charge:
            await self.currency_service.lock_currency(account.owner_id)

        # Step 5: Move balance and append entry
        account.balance = account.balance - value
        account.total_debits = account.total_debits + value
        entry = self._build_entry(account, value, transaction_type, TransactionDirection.DEBIT, status, context)
        entry = await self.transaction_repo.create(entry)
        await self.account_repo.update(account)

        logger.info(
            f"Debited {value} from account {account.id} ({transaction_type.value}, {status.value}), "
            f"balance_after={account.balance}"
        )
        return entry

    async def complete_pending(self, transaction_id: str) -> VirtualTransaction:
        """Settle a held debit; the balance already reflects it"""
        entry = await self._get_pending(transaction_id, "complete")
        entry.status = TransactionStatus.COMPLETED
        entry.processed_at = datetime.utcnow()
        return await self.transaction_repo.update(entry)

    async def fail_pending(self, transaction_id: str, reason: str) -> VirtualTransaction:
        """
        Release a held debit

        The entry becomes FAILED and its amount returns to the balance.
        total_credits grows by the amount; total_debits is left untouched.
        """
        entry = await self._get_pending(transaction_id, "reject")
        account = await self._lock_account(entry.virtual_account_id)

        account.balance = account.balance + entry.amount
        account.total_credits = account.total_credits + entry.amount
        await self.account_repo.update(account)

        entry.status = TransactionStatus.FAILED
        entry.failed_reason = reason
        entry.processed_at = datetime.utcnow()
        entry = await self.transaction_repo.update(entry)

        logger.info(f"Released held debit {entry.id}: {entry.amount} back to account {account.id}")
        return entry

    async def _get_pending(self, transaction_id: str, action: str) -> VirtualTransaction:
        entry = await self.transaction_repo.get_by_id(transaction_id, for_update=True)
        if not entry:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        if entry.status != TransactionStatus.PENDING:
            raise InvalidStateTransitionError("transaction", entry.status.value, action)
        return entry
