"""Refund Request Use Cases

A refund is a request object, not a ledger entry. Approval posts a genuine
credit of the matching refund type back to the company wallet; the credit
references the refunded charge so a charge is refunded at most once.
"""

import logging
from datetime import datetime
from typing import List, Optional
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.refund_request_repository import RefundRequestRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import (
    AccountNotFoundError,
    InvalidStateTransitionError,
    LedgerError,
    RefundRequestNotFoundError,
    TransactionNotFoundError,
)
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.refund_request import RefundRequest, RefundStatus
from src.domain.transaction_metadata import ReversalDetails
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import (
    REFUND_TYPE_FOR,
    TransactionDirection,
    TransactionStatus,
    VirtualTransaction,
)
from .dtos import RefundCommandDTO, RefundRequestDTO

logger = logging.getLogger(__name__)

REFUND_REFERENCE = "TRANSACTION"


def _event(event_type: EventType, request: RefundRequest, **extra) -> OutboxEvent:
    payload = {
        "company_id": request.company_id,
        "transaction_id": request.transaction_id,
        "amount": str(request.amount),
        "status": request.status.value,
    }
    payload.update(extra)
    return OutboxEvent.build(event_type, "REFUND_REQUEST", request.id, payload)


async def _already_refunded(repo: VirtualTransactionRepository, charge: VirtualTransaction) -> bool:
    return await repo.exists_by_reference(list(REFUND_TYPE_FOR.values()), REFUND_REFERENCE, charge.id)


class RequestRefund:
    """
    Use Case: Ask for a refund of a completed charge

    Business Rules:
    1. The charge must be a COMPLETED DEBIT of the company's own wallet
    2. Only job, subscription and add-on charges are refundable
    3. A charge that was already refunded cannot be refunded again
    4. At most one PENDING request per charge
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: VirtualAccountRepository,
        transaction_repo: VirtualTransactionRepository,
        refund_repo: RefundRequestRepository,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.refund_repo = refund_repo
        self.outbox_repo = outbox_repo

    async def execute(self, command: RefundCommandDTO) -> RefundRequestDTO:
        async def work():
            # Step 1: Charge must belong to the company's wallet
            account = await self.account_repo.get_by_owner(AccountOwnerType.COMPANY, command.company_id)
            if not account:
                raise AccountNotFoundError(f"No virtual account for company {command.company_id}")

            charge = await self.transaction_repo.get_by_id(command.transaction_id)
            if not charge or charge.virtual_account_id != account.id:
                raise TransactionNotFoundError(f"Transaction {command.transaction_id} not found")

            # Step 2: Only completed, refundable debits
            if (
                charge.direction != TransactionDirection.DEBIT
                or charge.status != TransactionStatus.COMPLETED
                or charge.type not in REFUND_TYPE_FOR
            ):
                raise InvalidStateTransitionError("transaction", f"{charge.type.value}/{charge.status.value}", "refund")

            # Step 3: No double refund, no duplicate request
            if await _already_refunded(self.transaction_repo, charge):
                raise InvalidStateTransitionError("transaction", "REFUNDED", "refund")
            if await self.refund_repo.get_pending_for_transaction(charge.id):
                raise LedgerError(
                    f"A refund request is already pending for transaction {charge.id}",
                    code="REFUND_ALREADY_REQUESTED",
                )

            # Step 4: Record request
            request = await self.refund_repo.create(
                RefundRequest(
                    company_id=command.company_id,
                    virtual_account_id=account.id,
                    transaction_id=charge.id,
                    transaction_type=charge.type,
                    amount=charge.amount,
                    reason=command.reason,
                )
            )
            await self.outbox_repo.add(_event(EventType.REFUND_REQUESTED, request, reason=command.reason))
            return request

        request = await self.uow.run(work)
        logger.info(f"Refund request {request.id} created for transaction {request.transaction_id}")
        return RefundRequestDTO.model_validate(request)


class ApproveRefund:
    """
    Use Case: Approve a refund request and credit the wallet

    Flow:
    1. Lock the request (must be PENDING)
    2. Re-check the charge has not been refunded meanwhile
    3. Credit the refund type of the charge with a reversal record
    4. Mark the request APPROVED with the refund entry id
    """

    def __init__(
        self,
        uow: UnitOfWork,
        transaction_repo: VirtualTransactionRepository,
        refund_repo: RefundRequestRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.transaction_repo = transaction_repo
        self.refund_repo = refund_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(self, request_id: str, admin_id: str, notes: Optional[str] = None) -> RefundRequestDTO:
        async def work():
            # Step 1: Lock request
            request = await _get_pending_request(self.refund_repo, request_id, "approve")

            # Step 2: Charge still refundable
            charge = await self.transaction_repo.get_by_id(request.transaction_id)
            if not charge:
                raise TransactionNotFoundError(f"Transaction {request.transaction_id} not found")
            if await _already_refunded(self.transaction_repo, charge):
                raise InvalidStateTransitionError("transaction", "REFUNDED", "refund")

            # Step 3: Compensating credit
            refund = await self.ledger.post_credit(
                request.virtual_account_id,
                request.amount,
                REFUND_TYPE_FOR[charge.type],
                PostingContext(
                    reference_type=REFUND_REFERENCE,
                    reference_id=charge.id,
                    description=f"Refund: {request.reason}",
                    created_by=admin_id,
                    pricing_peg=charge.pricing_peg_used,
                    billing_currency=charge.billing_currency_used,
                    price_book_id=charge.price_book_id,
                    price_book_version=charge.price_book_version,
                    override_id=charge.override_id,
                    details=ReversalDetails(
                        reversal_of_transaction_id=charge.id,
                        source="REFUND_REQUEST",
                        reason=request.reason,
                    ),
                ),
            )

            # Step 4: Close request
            request.status = RefundStatus.APPROVED
            request.processed_by = admin_id
            request.processed_at = datetime.utcnow()
            request.admin_notes = notes
            request.refund_transaction_id = refund.id
            request = await self.refund_repo.update(request)
            await self.outbox_repo.add(_event(EventType.REFUND_APPROVED, request, refund_transaction_id=refund.id))
            return request

        request = await self.uow.run(work)
        logger.info(f"Refund request {request.id} approved by {admin_id}, credited {request.amount}")
        return RefundRequestDTO.model_validate(request)


class RejectRefund:

    def __init__(self, uow: UnitOfWork, refund_repo: RefundRequestRepository, outbox_repo: OutboxRepository):
        self.uow = uow
        self.refund_repo = refund_repo
        self.outbox_repo = outbox_repo

    async def execute(self, request_id: str, admin_id: str, reason: str) -> RefundRequestDTO:
        async def work():
            request = await _get_pending_request(self.refund_repo, request_id, "reject")
            request.status = RefundStatus.REJECTED
            request.processed_by = admin_id
            request.processed_at = datetime.utcnow()
            request.rejection_reason = reason
            request = await self.refund_repo.update(request)
            await self.outbox_repo.add(_event(EventType.REFUND_REJECTED, request, reason=reason))
            return request

        request = await self.uow.run(work)
        logger.info(f"Refund request {request.id} rejected by {admin_id}: {reason}")
        return RefundRequestDTO.model_validate(request)


class ListRefundRequests:

    def __init__(self, refund_repo: RefundRequestRepository):
        self.refund_repo = refund_repo

    async def execute(
        self, company_id: Optional[str] = None, status: Optional[RefundStatus] = None
    ) -> List[RefundRequestDTO]:
        requests = await self.refund_repo.list(company_id=company_id, status=status)
        return [RefundRequestDTO.model_validate(request) for request in requests]


async def _get_pending_request(repo: RefundRequestRepository, request_id: str, action: str) -> RefundRequest:
    request = await repo.get_by_id(request_id, for_update=True)
    if not request:
        raise RefundRequestNotFoundError(f"Refund request {request_id} not found")
    if request.status != RefundStatus.PENDING:
        raise InvalidStateTransitionError("refund request", request.status.value, action)
    return request
