"""Integration tests for held withdrawals and outbox delivery"""

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from sqlmodel import select

from src.app.use_cases.events import DispatchOutboxEvents
from src.app.use_cases.wallet.accounts import CreditAccount, GetOrCreateAccount
from src.app.use_cases.wallet.dtos import PostingCommandDTO, WithdrawalCommandDTO
from src.app.use_cases.wallet.reconcile_ledger import ReconcileLedger
from src.app.use_cases.wallet.withdrawals import ApproveWithdrawal, RejectWithdrawal, RequestWithdrawal
from src.depends import LedgerContainer
from src.domain.errors import InsufficientBalanceError, InvalidStateTransitionError
from src.domain.outbox_event import EventType, OutboxEvent, OutboxStatus
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionStatus, TransactionType


async def funded_consultant(session, amount="800.00"):
    c = LedgerContainer(session)
    account = await GetOrCreateAccount(c.uow, c.account_repo).execute(AccountOwnerType.CONSULTANT, "consultant_1")
    await CreditAccount(c.uow, c.ledger).execute(
        PostingCommandDTO(account_id=account.id, amount=Decimal(amount), transaction_type=TransactionType.COMMISSION_EARNED)
    )
    return account


def withdrawal(amount):
    return WithdrawalCommandDTO(owner_id="consultant_1", amount=Decimal(amount), payment_method="BANK_TRANSFER")


async def stored_account(session_factory, account_id):
    async with session_factory() as fresh:
        return await LedgerContainer(fresh).account_repo.get_by_id(account_id)


@pytest.mark.asyncio
class TestWithdrawalLifecycle:

    async def test_reject_returns_held_funds(self, db_session, session_factory):
        """
        Given: A consultant with 800.00
        When: 300.00 is requested and then rejected
        Then: The funds are held at request time and returned on rejection
        """
        # Arrange
        account = await funded_consultant(db_session)
        c = LedgerContainer(db_session)

        # Act
        held = await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("300.00"))
        after_request = await stored_account(session_factory, account.id)
        rejected = await RejectWithdrawal(c.uow, c.transaction_repo, c.ledger, c.outbox_repo).execute(
            held.id, "Bank details invalid", admin_id="admin_1"
        )

        # Assert
        assert held.status == TransactionStatus.PENDING
        assert held.details.payment_method == "BANK_TRANSFER"
        assert after_request.balance == Decimal("500.00")
        assert rejected.status == TransactionStatus.FAILED
        assert rejected.failed_reason == "Bank details invalid"

        final = await stored_account(session_factory, account.id)
        assert final.balance == Decimal("800.00")
        assert final.total_credits == Decimal("1100.00")
        assert final.total_debits == Decimal("300.00")

        result = await ReconcileLedger(c.account_repo, c.transaction_repo).execute()
        assert result.discrepancies_found == 0

    async def test_approved_withdrawal_cannot_be_rejected(self, db_session, session_factory):
        # Arrange
        account = await funded_consultant(db_session)
        c = LedgerContainer(db_session)
        held = await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("200.00"))

        # Act
        approved = await ApproveWithdrawal(c.uow, c.transaction_repo, c.ledger, c.outbox_repo).execute(held.id)
        with pytest.raises(InvalidStateTransitionError):
            await RejectWithdrawal(c.uow, c.transaction_repo, c.ledger, c.outbox_repo).execute(held.id, "Too late")

        # Assert
        assert approved.status == TransactionStatus.COMPLETED
        assert (await stored_account(session_factory, account.id)).balance == Decimal("600.00")

    async def test_withdrawal_above_balance_rejected(self, db_session, session_factory):
        # Arrange
        account = await funded_consultant(db_session, "100.00")
        c = LedgerContainer(db_session)

        # Act
        with pytest.raises(InsufficientBalanceError):
            await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("100.01"))

        # Assert
        assert (await stored_account(session_factory, account.id)).balance == Decimal("100.00")
        async with session_factory() as fresh:
            events = (await fresh.execute(select(OutboxEvent))).scalars().all()
        assert [e.event_type for e in events] == []


@pytest.mark.asyncio
class TestOutboxDelivery:

    async def test_events_written_with_the_change_and_delivered_later(self, db_session, session_factory):
        """
        Given: A withdrawal request committed together with its event
        When: The dispatcher runs twice, failing the first time
        Then: The event is retried and ends SENT after two attempts
        """
        # Arrange
        await funded_consultant(db_session)
        c = LedgerContainer(db_session)
        await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("50.00"))

        notification_service = MagicMock()
        notification_service.send_event = AsyncMock(side_effect=[False, True])

        # Act
        async with session_factory() as session:
            worker_container = LedgerContainer(session)
            dispatch = DispatchOutboxEvents(
                uow=worker_container.uow,
                outbox_repo=worker_container.outbox_repo,
                notification_service=notification_service,
                batch_size=10,
                max_attempts=3,
                retry_base_seconds=0,
            )
            first = await dispatch.execute()
            second = await dispatch.execute()

        # Assert
        assert first.failed == 1
        assert second.delivered == 1
        async with session_factory() as fresh:
            events = (await fresh.execute(select(OutboxEvent))).scalars().all()
        assert len(events) == 1
        assert events[0].event_type == EventType.WITHDRAWAL_REQUESTED
        assert events[0].status == OutboxStatus.SENT
        assert events[0].attempts == 2
        assert events[0].data["amount"] == "50.00"

    async def test_failed_event_waits_out_its_backoff(self, db_session, session_factory):
        # Arrange
        await funded_consultant(db_session)
        c = LedgerContainer(db_session)
        await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("50.00"))

        notification_service = MagicMock()
        notification_service.send_event = AsyncMock(return_value=False)

        # Act
        async with session_factory() as session:
            worker_container = LedgerContainer(session)
            dispatch = DispatchOutboxEvents(
                uow=worker_container.uow,
                outbox_repo=worker_container.outbox_repo,
                notification_service=notification_service,
                batch_size=10,
                max_attempts=3,
                retry_base_seconds=300,
            )
            first = await dispatch.execute()
            second = await dispatch.execute()

        # Assert
        assert first.failed == 1
        assert second.delivered == 0
        assert second.failed == 0
        notification_service.send_event.assert_awaited_once()
        async with session_factory() as fresh:
            event = (await fresh.execute(select(OutboxEvent))).scalars().one()
        assert event.status == OutboxStatus.FAILED
        assert event.next_attempt_at is not None

    async def test_two_dispatchers_deliver_each_event_once(self, db_session, session_factory):
        """
        Given: One pending event
        When: Two dispatchers run at the same time on separate connections
        Then: Only one of them claims and sends it
        """
        # Arrange
        await funded_consultant(db_session)
        c = LedgerContainer(db_session)
        await RequestWithdrawal(c.uow, c.account_repo, c.ledger, c.outbox_repo).execute(withdrawal("50.00"))

        notification_service = MagicMock()
        notification_service.send_event = AsyncMock(return_value=True)

        async def run_dispatcher():
            async with session_factory() as session:
                worker_container = LedgerContainer(session)
                return await DispatchOutboxEvents(
                    uow=worker_container.uow,
                    outbox_repo=worker_container.outbox_repo,
                    notification_service=notification_service,
                    batch_size=10,
                    max_attempts=3,
                ).execute()

        # Act
        results = await asyncio.gather(run_dispatcher(), run_dispatcher())

        # Assert
        assert sorted(result.delivered for result in results) == [0, 1]
        notification_service.send_event.assert_awaited_once()
