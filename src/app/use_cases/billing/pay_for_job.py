"""PayForJobFromWallet Use Case

Charges a job posting to the company wallet at the dynamically resolved
price, and records the payment snapshot on the job.
"""

import logging
from datetime import datetime
from typing import Optional
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.consultant_repository import ConsultantRepository
from src.app.repositories.job_repository import JobRepository
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.currency_assignment import CurrencyAssignmentService
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.salary_band import SalaryBandService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.commission import CommissionType
from src.domain.errors import JobNotFoundError, LedgerError
from src.domain.job import SELF_MANAGED, Job, JobPaymentStatus
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType, VirtualTransaction
from .dtos import JobPaymentCommandDTO, JobPaymentResultDTO, JobPricingDTO

logger = logging.getLogger(__name__)

JOB_REFERENCE = "JOB"
REVERSAL_REFERENCE = "TRANSACTION"


class PayForJobFromWallet:
    """
    Use Case: Pay for a job posting from the company wallet

    Business Rules:
    1. Self-managed jobs are free: success without any money movement
    2. A job is charged at most once (PAID jobs, or jobs with an unrefunded
       charge, are reported as already charged)
    3. The charge is validated against the company currency lock
    4. Balance check, debit, currency lock and job update are one
       transaction; on failure neither the job nor the wallet changes
    5. The company's sales consultant is awarded a RECRUITMENT_SERVICE
       commission in the same transaction (once per consultant and job);
       companies without a known consultant are skipped with a warning
    6. Failures are returned as a result, never raised

    Flow:
    1. Short-circuit self-managed
    2. Resolve price (salary band, then price book)
    3. Resolve company currencies
    4. In one transaction: lock job, idempotency check, debit, update job,
       award sales commission, emit JOB_PAYMENT_COMPLETED
    5. On LedgerError: rollback and report failure
    """

    def __init__(
        self,
        uow: UnitOfWork,
        job_repo: JobRepository,
        account_repo: VirtualAccountRepository,
        transaction_repo: VirtualTransactionRepository,
        salary_band_service: SalaryBandService,
        currency_service: CurrencyAssignmentService,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
        company_repo: CompanyRepository,
        consultant_repo: ConsultantRepository,
        commission_workflow: CommissionWorkflow,
    ):
        self.uow = uow
        self.job_repo = job_repo
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.salary_band_service = salary_band_service
        self.currency_service = currency_service
        self.ledger = ledger
        self.outbox_repo = outbox_repo
        self.company_repo = company_repo
        self.consultant_repo = consultant_repo
        self.commission_workflow = commission_workflow

    async def execute(self, command: JobPaymentCommandDTO) -> JobPaymentResultDTO:
        """
        Execute job payment

        Args:
            command: JobPaymentCommandDTO with company_id, job_id, salary_max, service_package

        Returns:
            JobPaymentResultDTO: success, or the error that prevented payment
        """
        # Step 1: Free package
        if command.service_package == SELF_MANAGED:
            return JobPaymentResultDTO(success=True)

        try:
            # Step 2: Dynamic price
            quote = await self.salary_band_service.price_job(
                command.company_id, command.salary_max, command.service_package
            )

            # Step 3: Company currencies
            currencies = await self.currency_service.get_company_currencies(command.company_id)

            pricing = JobPricingDTO(
                price=quote.price,
                currency=quote.currency,
                product_code=quote.product_code,
                band=quote.band,
                is_executive_search=quote.is_executive_search,
                pricing_peg=currencies.pricing_peg,
                price_book_id=quote.price_book_id,
                price_book_version=quote.price_book_version,
                override_id=quote.override_id,
            )

            # Step 4: Charge and record atomically
            async def work():
                job = await self.job_repo.get_by_id(command.job_id, for_update=True)
                if not job or job.company_id != command.company_id:
                    raise JobNotFoundError(f"Job {command.job_id} not found")

                if job.is_paid:
                    return None, True

                account = await self.account_repo.get_or_create(AccountOwnerType.COMPANY, command.company_id)

                existing = await self._unrefunded_charge(account.id, job.id)
                if existing:
                    logger.warning(f"Job {job.id} has charge {existing.id} but was not marked paid; fixing status")
                    currency = existing.billing_currency_used or quote.currency
                    await self._mark_paid(job, existing.amount, currency, pricing)
                    return existing, True

                entry = await self.ledger.post_debit(
                    account.id,
                    quote.price,
                    TransactionType.JOB_POSTING_DEDUCTION,
                    PostingContext(
                        reference_type=JOB_REFERENCE,
                        reference_id=job.id,
                        description=f"Job posting: {job.title} ({command.service_package})",
                        created_by=command.user_id,
                        pricing_peg=currencies.pricing_peg,
                        billing_currency=quote.currency,
                        price_book_id=quote.price_book_id,
                        price_book_version=quote.price_book_version,
                        override_id=quote.override_id,
                    ),
                )
                await self._mark_paid(job, entry.amount, quote.currency, pricing)
                await self._attribute_sale(job, command.user_id)
                await self.outbox_repo.add(
                    OutboxEvent.build(
                        EventType.JOB_PAYMENT_COMPLETED,
                        JOB_REFERENCE,
                        job.id,
                        {
                            "company_id": command.company_id,
                            "transaction_id": entry.id,
                            "amount": str(entry.amount),
                            "currency": quote.currency,
                            "product_code": quote.product_code,
                        },
                    )
                )
                return entry, False

            entry, already_charged = await self.uow.run(work)

        except LedgerError as e:
            # Step 5: Nothing of the attempt may persist
            await self.uow.rollback()
            logger.warning(f"Payment for job {command.job_id} failed: {e.code} {e.message}")
            return JobPaymentResultDTO(success=False, error=e.message, error_code=e.code)

        if already_charged:
            logger.info(f"Job {command.job_id} was already charged")
        else:
            logger.info(f"Job {command.job_id} paid: {pricing.price} {pricing.currency}")

        return JobPaymentResultDTO(
            success=True,
            pricing=pricing,
            transaction_id=entry.id if entry else None,
            was_already_charged=already_charged,
        )

    async def _attribute_sale(self, job: Job, user_id: Optional[str]) -> None:
        company = await self.company_repo.get_by_id(job.company_id)
        sales_agent_id = company.sales_agent_id if company else None
        if not sales_agent_id:
            return

        consultant = await self.consultant_repo.get_by_id(sales_agent_id)
        if not consultant:
            logger.warning(f"Sales agent {sales_agent_id} is not a consultant; no commission for job {job.id}")
            return

        await self.commission_workflow.award(
            consultant.id,
            CommissionType.RECRUITMENT_SERVICE,
            job_id=job.id,
            description=f"Job payment: {job.title}",
            created_by=user_id,
        )

    async def _unrefunded_charge(self, account_id: str, job_id: str) -> Optional[VirtualTransaction]:
        charge = await self.transaction_repo.find_latest_by_reference(
            account_id, TransactionType.JOB_POSTING_DEDUCTION, JOB_REFERENCE, job_id
        )
        if not charge:
            return None
        if await self.transaction_repo.exists_by_reference(
            [TransactionType.JOB_REFUND], REVERSAL_REFERENCE, charge.id
        ):
            return None
        return charge

    async def _mark_paid(self, job: Job, amount, currency: str, pricing: JobPricingDTO) -> Job:
        job.payment_status = JobPaymentStatus.PAID
        job.payment_amount = amount
        job.payment_currency = currency
        job.payment_completed_at = datetime.utcnow()
        job.payment_failed_at = None
        job.price_book_id = pricing.price_book_id
        job.pricing_peg = pricing.pricing_peg
        job.price_book_version = pricing.price_book_version
        return await self.job_repo.update(job)
