"""RefundJobPayment Use Case

Reverses the wallet charge of a managed-service job.
"""

import logging
from src.app.repositories.job_repository import JobRepository
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.wallet.dtos import TransactionDTO
from src.domain.errors import (
    AccountNotFoundError,
    InvalidStateTransitionError,
    JobNotFoundError,
    TransactionNotFoundError,
)
from src.domain.job import JobPaymentStatus
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.transaction_metadata import ReversalDetails
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType
from .dtos import JobRefundCommandDTO
from .pay_for_job import JOB_REFERENCE, REVERSAL_REFERENCE

logger = logging.getLogger(__name__)


class RefundJobPayment:
    """
    Use Case: Credit back the latest charge of a job

    Business Rules:
    1. The latest JOB_POSTING_DEDUCTION of the job is refunded, at most once
    2. The refund is a JOB_REFUND credit referencing the charge
    3. The job returns to payment_status PENDING so it can be paid again

    Flow:
    1. Lock job
    2. Find latest charge and make sure it is not refunded yet
    3. Post compensating credit
    4. Reset job payment fields and emit JOB_PAYMENT_REFUNDED
    """

    def __init__(
        self,
        uow: UnitOfWork,
        job_repo: JobRepository,
        account_repo: VirtualAccountRepository,
        transaction_repo: VirtualTransactionRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.job_repo = job_repo
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(self, command: JobRefundCommandDTO) -> TransactionDTO:
        async def work():
            # Step 1: Lock job
            job = await self.job_repo.get_by_id(command.job_id, for_update=True)
            if not job or job.company_id != command.company_id:
                raise JobNotFoundError(f"Job {command.job_id} not found")

            # Step 2: Latest charge, not yet refunded
            account = await self.account_repo.get_by_owner(AccountOwnerType.COMPANY, command.company_id)
            if not account:
                raise AccountNotFoundError(f"No virtual account for company {command.company_id}")

            charge = await self.transaction_repo.find_latest_by_reference(
                account.id, TransactionType.JOB_POSTING_DEDUCTION, JOB_REFERENCE, job.id
            )
            if not charge:
                raise TransactionNotFoundError(f"No payment found for job {job.id}")
            if await self.transaction_repo.exists_by_reference(
                [TransactionType.JOB_REFUND], REVERSAL_REFERENCE, charge.id
            ):
                raise InvalidStateTransitionError("job payment", "REFUNDED", "refund")

            # Step 3: Compensating credit
            refund = await self.ledger.post_credit(
                account.id,
                charge.amount,
                TransactionType.JOB_REFUND,
                PostingContext(
                    reference_type=REVERSAL_REFERENCE,
                    reference_id=charge.id,
                    description=f"Refund for job {job.title}: {command.reason}",
                    created_by=command.user_id,
                    pricing_peg=charge.pricing_peg_used,
                    billing_currency=charge.billing_currency_used,
                    price_book_id=charge.price_book_id,
                    price_book_version=charge.price_book_version,
                    override_id=charge.override_id,
                    details=ReversalDetails(
                        reversal_of_transaction_id=charge.id,
                        source="JOB_PAYMENT",
                        reason=command.reason,
                    ),
                ),
            )

            # Step 4: Job can be paid again
            job.payment_status = JobPaymentStatus.PENDING
            job.payment_completed_at = None
            await self.job_repo.update(job)
            await self.outbox_repo.add(
                OutboxEvent.build(
                    EventType.JOB_PAYMENT_REFUNDED,
                    JOB_REFERENCE,
                    job.id,
                    {
                        "company_id": command.company_id,
                        "charge_transaction_id": charge.id,
                        "refund_transaction_id": refund.id,
                        "amount": str(refund.amount),
                        "reason": command.reason,
                    },
                )
            )
            return refund

        refund = await self.uow.run(work)
        logger.info(f"Refunded {refund.amount} for job {command.job_id}")
        return TransactionDTO.model_validate(refund)
