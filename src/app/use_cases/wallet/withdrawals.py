"""Withdrawal Use Cases

A withdrawal is a COMMISSION_WITHDRAWAL debit created PENDING: the funds
leave the balance at request time and an admin later settles the entry.

    PENDING --approve--> COMPLETED   (no further balance change)
    PENDING --reject---> FAILED      (amount returned to the balance)
"""

import logging
from typing import List, Optional
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import AccountNotFoundError, TransactionNotFoundError
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.transaction_metadata import WithdrawalDetails
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionStatus, TransactionType, VirtualTransaction
from .dtos import TransactionDTO, TransactionPageDTO, WithdrawalCommandDTO

logger = logging.getLogger(__name__)

WITHDRAWAL_REFERENCE = "WITHDRAWAL"


def _event(event_type: EventType, entry: VirtualTransaction, **extra) -> OutboxEvent:
    payload = {
        "virtual_account_id": entry.virtual_account_id,
        "amount": str(entry.amount),
        "status": entry.status.value,
    }
    payload.update(extra)
    return OutboxEvent.build(event_type, WITHDRAWAL_REFERENCE, entry.id, payload)


class RequestWithdrawal:
    """
    Use Case: Request a payout from a wallet

    Business Rules:
    1. Amount must be > 0 and not exceed the balance
    2. The balance and total_debits move immediately (funds are held)
    3. The entry stays PENDING until an admin approves or rejects it
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: VirtualAccountRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(self, command: WithdrawalCommandDTO) -> TransactionDTO:
        async def work():
            account = await self.account_repo.get_by_owner(command.owner_type, command.owner_id)
            if not account:
                raise AccountNotFoundError(
                    f"No virtual account for {command.owner_type.value} {command.owner_id}"
                )

            entry = await self.ledger.post_debit(
                account.id,
                command.amount,
                TransactionType.COMMISSION_WITHDRAWAL,
                PostingContext(
                    reference_type=WITHDRAWAL_REFERENCE,
                    description=f"Withdrawal via {command.payment_method}",
                    created_by=command.owner_id,
                    details=WithdrawalDetails(
                        payment_method=command.payment_method,
                        bank_details=command.bank_details,
                        notes=command.notes,
                    ),
                ),
                status=TransactionStatus.PENDING,
            )
            await self.outbox_repo.add(
                _event(EventType.WITHDRAWAL_REQUESTED, entry, owner_id=command.owner_id)
            )
            return entry

        entry = await self.uow.run(work)
        logger.info(f"Withdrawal {entry.id} requested by {command.owner_id}: {entry.amount}")
        return TransactionDTO.model_validate(entry)


class ApproveWithdrawal:
    """Use Case: Mark a held withdrawal as paid out"""

    def __init__(
        self,
        uow: UnitOfWork,
        transaction_repo: VirtualTransactionRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.transaction_repo = transaction_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(self, transaction_id: str, admin_id: Optional[str] = None) -> TransactionDTO:
        async def work():
            await _get_withdrawal(self.transaction_repo, transaction_id)
            entry = await self.ledger.complete_pending(transaction_id)
            await self.outbox_repo.add(_event(EventType.WITHDRAWAL_APPROVED, entry, processed_by=admin_id))
            return entry

        entry = await self.uow.run(work)
        logger.info(f"Withdrawal {entry.id} approved by {admin_id}")
        return TransactionDTO.model_validate(entry)


class RejectWithdrawal:
    """
    Use Case: Reject a held withdrawal

    The entry becomes FAILED with the reason, the amount goes back to the
    balance and total_credits grows by it. total_debits is not decremented.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        transaction_repo: VirtualTransactionRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.transaction_repo = transaction_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(self, transaction_id: str, reason: str, admin_id: Optional[str] = None) -> TransactionDTO:
        async def work():
            await _get_withdrawal(self.transaction_repo, transaction_id)
            entry = await self.ledger.fail_pending(transaction_id, reason)
            await self.outbox_repo.add(
                _event(EventType.WITHDRAWAL_REJECTED, entry, reason=reason, processed_by=admin_id)
            )
            return entry

        entry = await self.uow.run(work)
        logger.info(f"Withdrawal {entry.id} rejected by {admin_id}: {reason}")
        return TransactionDTO.model_validate(entry)


class ListPendingWithdrawals:

    def __init__(self, transaction_repo: VirtualTransactionRepository):
        self.transaction_repo = transaction_repo

    async def execute(self, limit: int = 50, offset: int = 0) -> List[TransactionDTO]:
        entries = await self.transaction_repo.list_by_type_and_status(
            TransactionType.COMMISSION_WITHDRAWAL, TransactionStatus.PENDING, limit=limit, offset=offset
        )
        return [TransactionDTO.model_validate(entry) for entry in entries]


class GetWithdrawalHistory:

    def __init__(self, account_repo: VirtualAccountRepository, transaction_repo: VirtualTransactionRepository):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(
        self, owner_type: AccountOwnerType, owner_id: str, limit: int = 50, offset: int = 0
    ) -> TransactionPageDTO:
        account = await self.account_repo.get_by_owner(owner_type, owner_id)
        if not account:
            raise AccountNotFoundError(f"No virtual account for {owner_type.value} {owner_id}")

        entries, total = await self.transaction_repo.list_by_account(
            account.id, transaction_type=TransactionType.COMMISSION_WITHDRAWAL, limit=limit, offset=offset
        )
        return TransactionPageDTO(
            transactions=[TransactionDTO.model_validate(entry) for entry in entries],
            total=total,
            limit=limit,
            offset=offset,
        )


async def _get_withdrawal(repo: VirtualTransactionRepository, transaction_id: str) -> VirtualTransaction:
    entry = await repo.get_by_id(transaction_id, for_update=True)
    if not entry or entry.type != TransactionType.COMMISSION_WITHDRAWAL:
        raise TransactionNotFoundError(f"Withdrawal {transaction_id} not found")
    return entry
