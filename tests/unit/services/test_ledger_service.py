"""Unit tests for VirtualLedger postings

Tests cover:
- Credits and debits move balance and lifetime totals
- Insufficient balance leaves the account untouched
- Company charges are checked against the currency lock, then lock it
- Held (PENDING) debits complete or release
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.ledger import PostingContext, VirtualLedger
from src.domain.errors import (
    AccountInactiveError,
    AccountNotFoundError,
    CurrencyMismatchError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidStateTransitionError,
)
from src.domain.virtual_account import AccountOwnerType, AccountStatus, VirtualAccount
from src.domain.virtual_transaction import (
    TransactionDirection,
    TransactionStatus,
    TransactionType,
    VirtualTransaction,
)


@pytest.fixture
def company_account():
    return VirtualAccount(
        id="acc_company",
        owner_type=AccountOwnerType.COMPANY,
        owner_id="company_1",
        balance=Decimal("1000.00"),
        total_credits=Decimal("1000.00"),
        total_debits=Decimal("0.00"),
    )


@pytest.fixture
def account_repo(company_account):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=company_account)
    repo.update = AsyncMock(side_effect=lambda account: account)
    return repo


@pytest.fixture
def transaction_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    repo.update = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def currency_service():
    service = MagicMock()
    service.validate_currency_lock = AsyncMock()
    service.lock_currency = AsyncMock(return_value=True)
    return service


@pytest.fixture
def ledger(account_repo, transaction_repo, currency_service):
    return VirtualLedger(account_repo, transaction_repo, currency_service)


@pytest.mark.asyncio
class TestPostCredit:

    async def test_credit_increases_balance_and_total_credits(self, ledger, company_account, transaction_repo):
        entry = await ledger.post_credit(
            "acc_company", Decimal("250.00"), TransactionType.WALLET_TOPUP, PostingContext(description="Top-up")
        )

        assert company_account.balance == Decimal("1250.00")
        assert company_account.total_credits == Decimal("1250.00")
        assert company_account.total_debits == Decimal("0.00")
        assert entry.direction == TransactionDirection.CREDIT
        assert entry.status == TransactionStatus.COMPLETED
        assert entry.balance_after == Decimal("1250.00")
        transaction_repo.create.assert_awaited_once()

    async def test_amount_rounded_to_cents(self, ledger, company_account):
        entry = await ledger.post_credit("acc_company", "10.005", TransactionType.WALLET_TOPUP)

        assert entry.amount == Decimal("10.01")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00")])
    async def test_non_positive_amount_rejected(self, ledger, account_repo, amount):
        with pytest.raises(InvalidAmountError):
            await ledger.post_credit("acc_company", amount, TransactionType.WALLET_TOPUP)

        account_repo.get_by_id.assert_not_awaited()

    async def test_unknown_account(self, ledger, account_repo):
        account_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(AccountNotFoundError):
            await ledger.post_credit("missing", Decimal("1.00"), TransactionType.WALLET_TOPUP)

    async def test_inactive_account(self, ledger, company_account):
        company_account.status = AccountStatus.INACTIVE

        with pytest.raises(AccountInactiveError) as exc_info:
            await ledger.post_credit("acc_company", Decimal("1.00"), TransactionType.WALLET_TOPUP)

        assert exc_info.value.status_code == 403

    async def test_company_credit_with_currency_locks_currency(self, ledger, currency_service):
        await ledger.post_credit(
            "acc_company", Decimal("100.00"), TransactionType.WALLET_TOPUP, PostingContext(billing_currency="AUD")
        )

        currency_service.lock_currency.assert_awaited_once_with("company_1")

    async def test_company_credit_in_other_currency_is_accepted(self, ledger, currency_service, company_account):
        """
        Given: A company whose currency is locked to AUD
        When: A credit carrying USD is posted (e.g. refund of a pre-override charge)
        Then: The credit lands; only the idempotent lock is attempted
        """
        currency_service.validate_currency_lock = AsyncMock(side_effect=CurrencyMismatchError("AUD", "USD"))

        entry = await ledger.post_credit(
            "acc_company", Decimal("100.00"), TransactionType.JOB_REFUND, PostingContext(billing_currency="USD")
        )

        assert company_account.balance == Decimal("1100.00")
        assert entry.billing_currency_used == "USD"
        currency_service.validate_currency_lock.assert_not_awaited()
        currency_service.lock_currency.assert_awaited_once_with("company_1")


@pytest.mark.asyncio
class TestPostDebit:

    async def test_debit_decreases_balance_and_grows_total_debits(self, ledger, company_account):
        entry = await ledger.post_debit(
            "acc_company",
            Decimal("400.00"),
            TransactionType.JOB_POSTING_DEDUCTION,
            PostingContext(reference_type="JOB", reference_id="job_1", price_book_version="2026-Q1"),
        )

        assert company_account.balance == Decimal("600.00")
        assert company_account.total_debits == Decimal("400.00")
        assert company_account.total_credits == Decimal("1000.00")
        assert entry.direction == TransactionDirection.DEBIT
        assert entry.reference_id == "job_1"
        assert entry.price_book_version == "2026-Q1"

    async def test_debit_of_exact_balance_reaches_zero(self, ledger, company_account):
        await ledger.post_debit("acc_company", Decimal("1000.00"), TransactionType.ADDON_SERVICE_CHARGE)

        assert company_account.balance == Decimal("0.00")

    async def test_insufficient_balance_leaves_account_untouched(
        self, ledger, company_account, account_repo, transaction_repo
    ):
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await ledger.post_debit("acc_company", Decimal("1500.00"), TransactionType.JOB_POSTING_DEDUCTION)

        error = exc_info.value
        assert error.required == Decimal("1500.00")
        assert error.available == Decimal("1000.00")
        assert error.shortfall == Decimal("500.00")
        assert error.to_dict()["shortfall"] == "500.00"
        assert company_account.balance == Decimal("1000.00")
        transaction_repo.create.assert_not_awaited()
        account_repo.update.assert_not_awaited()

    async def test_currency_mismatch_checked_before_balance(self, ledger, currency_service, company_account):
        currency_service.validate_currency_lock = AsyncMock(side_effect=CurrencyMismatchError("AUD", "USD"))

        with pytest.raises(CurrencyMismatchError):
            await ledger.post_debit(
                "acc_company",
                Decimal("100.00"),
                TransactionType.JOB_POSTING_DEDUCTION,
                PostingContext(billing_currency="USD"),
            )

        assert company_account.balance == Decimal("1000.00")
        currency_service.lock_currency.assert_not_awaited()

    async def test_first_company_charge_locks_currency(self, ledger, currency_service):
        await ledger.post_debit(
            "acc_company",
            Decimal("100.00"),
            TransactionType.JOB_POSTING_DEDUCTION,
            PostingContext(billing_currency="AUD"),
        )

        currency_service.validate_currency_lock.assert_awaited_once_with("company_1", "AUD")
        currency_service.lock_currency.assert_awaited_once_with("company_1")

    async def test_consultant_debit_skips_currency_checks(self, ledger, company_account, currency_service):
        company_account.owner_type = AccountOwnerType.CONSULTANT

        await ledger.post_debit(
            "acc_company", Decimal("10.00"), TransactionType.COMMISSION_CLAWBACK, PostingContext(billing_currency="USD")
        )

        currency_service.validate_currency_lock.assert_not_awaited()
        currency_service.lock_currency.assert_not_awaited()

    async def test_pending_debit_holds_funds(self, ledger, company_account):
        entry = await ledger.post_debit(
            "acc_company", Decimal("300.00"), TransactionType.COMMISSION_WITHDRAWAL, status=TransactionStatus.PENDING
        )

        assert entry.status == TransactionStatus.PENDING
        assert company_account.balance == Decimal("700.00")


def held_withdrawal(status=TransactionStatus.PENDING):
    return VirtualTransaction(
        id="tx_hold",
        virtual_account_id="acc_company",
        type=TransactionType.COMMISSION_WITHDRAWAL,
        amount=Decimal("300.00"),
        direction=TransactionDirection.DEBIT,
        balance_after=Decimal("700.00"),
        status=status,
    )


@pytest.mark.asyncio
class TestHeldDebits:

    async def test_complete_pending(self, ledger, transaction_repo, company_account):
        transaction_repo.get_by_id = AsyncMock(return_value=held_withdrawal())

        entry = await ledger.complete_pending("tx_hold")

        assert entry.status == TransactionStatus.COMPLETED
        assert entry.processed_at is not None
        assert company_account.balance == Decimal("1000.00")

    async def test_fail_pending_restores_balance(self, ledger, transaction_repo, company_account):
        company_account.balance = Decimal("700.00")
        company_account.total_debits = Decimal("300.00")
        transaction_repo.get_by_id = AsyncMock(return_value=held_withdrawal())

        entry = await ledger.fail_pending("tx_hold", "Bank details invalid")

        assert entry.status == TransactionStatus.FAILED
        assert entry.failed_reason == "Bank details invalid"
        assert company_account.balance == Decimal("1000.00")
        assert company_account.total_credits == Decimal("1300.00")
        assert company_account.total_debits == Decimal("300.00")

    async def test_settled_entry_cannot_be_settled_again(self, ledger, transaction_repo):
        transaction_repo.get_by_id = AsyncMock(return_value=held_withdrawal(TransactionStatus.COMPLETED))

        with pytest.raises(InvalidStateTransitionError):
            await ledger.fail_pending("tx_hold", "late")
