"""Integration tests for ledger postings against a real database

Tests cover:
- Credit/debit persistence of balance, counters and entries
- Failed debit leaves nothing behind
- Concurrent debits never overdraw the account
- Reconciliation agrees with the ledger after mixed activity
"""

import asyncio
import pytest
from decimal import Decimal

from src.app.services.ledger import PostingContext
from src.app.use_cases.wallet.accounts import CreditAccount, DebitAccount, GetOrCreateAccount
from src.app.use_cases.wallet.dtos import PostingCommandDTO
from src.app.use_cases.wallet.reconcile_ledger import ReconcileLedger
from src.depends import LedgerContainer
from src.domain.errors import InsufficientBalanceError
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType


async def open_account(session, owner_type=AccountOwnerType.CONSULTANT, owner_id="consultant_1"):
    container = LedgerContainer(session)
    return await GetOrCreateAccount(container.uow, container.account_repo).execute(owner_type, owner_id)


async def credit(session, account_id, amount, transaction_type=TransactionType.ADMIN_ADJUSTMENT):
    container = LedgerContainer(session)
    command = PostingCommandDTO(account_id=account_id, amount=Decimal(amount), transaction_type=transaction_type)
    return await CreditAccount(container.uow, container.ledger).execute(command)


async def debit(session, account_id, amount, transaction_type=TransactionType.ADDON_SERVICE_CHARGE):
    container = LedgerContainer(session)
    command = PostingCommandDTO(
        account_id=account_id,
        amount=Decimal(amount),
        transaction_type=transaction_type,
        context=PostingContext(description="Integration debit"),
    )
    return await DebitAccount(container.uow, container.ledger).execute(command)


@pytest.mark.asyncio
class TestLedgerPersistence:

    async def test_credit_then_debit_persists_balance_and_entries(self, db_session, session_factory):
        """
        Given: A fresh consultant wallet
        When: 500.00 is credited and 120.50 debited
        Then: Balance, counters and both entries are persisted
        """
        # Arrange
        account = await open_account(db_session)

        # Act
        credit_entry = await credit(db_session, account.id, "500.00")
        debit_entry = await debit(db_session, account.id, "120.50")

        # Assert: read back through an independent session
        async with session_factory() as fresh:
            container = LedgerContainer(fresh)
            stored = await container.account_repo.get_by_id(account.id)
            entries, _ = await container.transaction_repo.list_by_account(account.id)

        assert stored.balance == Decimal("379.50")
        assert stored.total_credits == Decimal("500.00")
        assert stored.total_debits == Decimal("120.50")
        assert credit_entry.balance_after == Decimal("500.00")
        assert debit_entry.balance_after == Decimal("379.50")
        assert {e.id for e in entries} == {credit_entry.id, debit_entry.id}

    async def test_account_is_created_once(self, db_session):
        first = await open_account(db_session, AccountOwnerType.COMPANY, "company_x")
        second = await open_account(db_session, AccountOwnerType.COMPANY, "company_x")

        assert first.id == second.id
        assert first.balance == Decimal("0")

    async def test_failed_debit_leaves_no_trace(self, db_session, session_factory):
        """
        Given: A wallet holding 100.00
        When: A 150.00 debit is attempted
        Then: InsufficientBalanceError; balance, counters and entries are unchanged
        """
        # Arrange
        account = await open_account(db_session)
        await credit(db_session, account.id, "100.00")

        # Act
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await debit(db_session, account.id, "150.00")

        # Assert
        assert exc_info.value.shortfall == Decimal("50.00")
        async with session_factory() as fresh:
            container = LedgerContainer(fresh)
            stored = await container.account_repo.get_by_id(account.id)
            entries, _ = await container.transaction_repo.list_by_account(account.id)

        assert stored.balance == Decimal("100.00")
        assert stored.total_debits == Decimal("0")
        assert len(entries) == 1


@pytest.mark.asyncio
class TestConcurrentDebits:

    async def test_two_debits_racing_for_the_same_funds(self, db_session, session_factory):
        """
        Given: A wallet holding 100.00
        When: Two sessions each debit 70.00 at the same time
        Then: Exactly one succeeds and the balance ends at 30.00
        """
        # Arrange
        account = await open_account(db_session)
        await credit(db_session, account.id, "100.00")

        async def attempt():
            async with session_factory() as session:
                return await debit(session, account.id, "70.00")

        # Act
        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        # Assert
        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], InsufficientBalanceError)

        async with session_factory() as fresh:
            stored = await LedgerContainer(fresh).account_repo.get_by_id(account.id)
        assert stored.balance == Decimal("30.00")
        assert stored.total_debits == Decimal("70.00")

    async def test_many_small_debits_all_fit(self, db_session, session_factory):
        # Arrange
        account = await open_account(db_session)
        await credit(db_session, account.id, "50.00")

        async def attempt():
            async with session_factory() as session:
                return await debit(session, account.id, "10.00")

        # Act
        results = await asyncio.gather(*(attempt() for _ in range(5)), return_exceptions=True)

        # Assert
        assert not [r for r in results if isinstance(r, Exception)]
        async with session_factory() as fresh:
            stored = await LedgerContainer(fresh).account_repo.get_by_id(account.id)
        assert stored.balance == Decimal("0.00")
        assert sorted(r.balance_after for r in results) == [
            Decimal("0.00"), Decimal("10.00"), Decimal("20.00"), Decimal("30.00"), Decimal("40.00")
        ]


@pytest.mark.asyncio
class TestReconciliationAgainstDatabase:

    async def test_no_discrepancies_after_activity(self, db_session):
        """
        Given: Several wallets with credits and debits
        When: Reconciliation runs
        Then: Every balance matches its ledger
        """
        # Arrange
        first = await open_account(db_session, AccountOwnerType.CONSULTANT, "consultant_1")
        second = await open_account(db_session, AccountOwnerType.COMPANY, "company_1")
        await credit(db_session, first.id, "300.00")
        await debit(db_session, first.id, "45.25")
        await credit(db_session, second.id, "1000.00")

        # Act
        container = LedgerContainer(db_session)
        result = await ReconcileLedger(container.account_repo, container.transaction_repo).execute()

        # Assert
        assert result.total_accounts_checked == 2
        assert result.discrepancies_found == 0

    async def test_tampered_balance_is_reported(self, db_session):
        # Arrange
        account = await open_account(db_session)
        await credit(db_session, account.id, "200.00")

        container = LedgerContainer(db_session)
        stored = await container.account_repo.get_by_id(account.id)
        stored.balance = Decimal("250.00")
        await container.account_repo.update(stored)
        await db_session.commit()

        # Act
        result = await ReconcileLedger(container.account_repo, container.transaction_repo).execute()

        # Assert
        assert result.discrepancies_found == 1
        assert result.discrepancies[0].discrepancy == Decimal("50.00")
