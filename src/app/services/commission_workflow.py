"""Commission Workflow

Commission lifecycle transitions and their ledger effects, run inside the
caller's unit of work.

    PENDING --confirm--> CONFIRMED --mark_as_paid--> PAID
    PENDING --clawback--> CANCELLED            (nothing was credited)
    CONFIRMED/PAID --dispute--> DISPUTED
    DISPUTED --resolve VALID--> CONFIRMED
    CONFIRMED/PAID/DISPUTED --clawback / resolve INVALID--> CLAWBACK
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple
from src.app.repositories.commission_repository import CommissionRepository
from src.app.repositories.consultant_repository import ConsultantRepository
from src.app.repositories.job_repository import JobRepository
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.services.ledger import PostingContext, VirtualLedger
from src.domain.commission import Commission, CommissionStatus, CommissionType, DisputeResolution
from src.domain.errors import (
    CommissionNotFoundError,
    ConsultantNotFoundError,
    InvalidAmountError,
    InvalidStateTransitionError,
    JobNotFoundError,
    SubscriptionNotFoundError,
)
from src.domain.money import to_money
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType

logger = logging.getLogger(__name__)

COMMISSION_REFERENCE = "COMMISSION"


class CommissionWorkflow:

    def __init__(
        self,
        commission_repo: CommissionRepository,
        consultant_repo: ConsultantRepository,
        job_repo: JobRepository,
        subscription_repo: SubscriptionRepository,
        account_repo: VirtualAccountRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
        default_rate: Decimal = Decimal("0.20"),
    ):
        self.commission_repo = commission_repo
        self.consultant_repo = consultant_repo
        self.job_repo = job_repo
        self.subscription_repo = subscription_repo
        self.account_repo = account_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo
        self.default_rate = Decimal(str(default_rate))

    async def _source_payment(
        self, job_id: Optional[str], subscription_id: Optional[str]
    ) -> Tuple[Optional[Decimal], Optional[str]]:
        """Payment amount and currency of the job or subscription a commission is earned on"""
        if job_id:
            job = await self.job_repo.get_by_id(job_id)
            if not job:
                raise JobNotFoundError(f"Job {job_id} not found")
            return job.payment_amount, job.payment_currency
        if subscription_id:
            subscription = await self.subscription_repo.get_by_id(subscription_id)
            if not subscription:
                raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
            return subscription.base_price, subscription.currency
        return None, None

    async def build_commission(
        self,
        consultant_id: str,
        commission_type: CommissionType,
        job_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        amount: Optional[Decimal] = None,
        rate: Optional[Decimal] = None,
        currency: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Commission:
        """
        Build an unsaved PENDING commission with its amount frozen

        Amount rule: explicit amount, else source payment x rate where rate
        is the explicit rate, else the consultant's default, else the
        configured default. Rounded half-up to cents.
        """
        consultant = await self.consultant_repo.get_by_id(consultant_id)
        if not consultant:
            raise ConsultantNotFoundError(f"Consultant {consultant_id} not found")

        source_amount, source_currency = await self._source_payment(job_id, subscription_id)

        effective_rate = rate
        if effective_rate is None:
            effective_rate = consultant.default_commission_rate
        if effective_rate is None:
            effective_rate = self.default_rate

        if amount is None:
            if source_amount is None:
                raise InvalidAmountError("Commission amount cannot be computed: source has no payment amount")
            amount = Decimal(str(source_amount)) * Decimal(str(effective_rate))

        value = to_money(amount)
        if value <= 0:
            raise InvalidAmountError("Commission amount must be greater than 0")

        return Commission(
            consultant_id=consultant.id,
            region_id=consultant.region_id,
            job_id=job_id,
            subscription_id=subscription_id,
            type=commission_type,
            amount=value,
            rate=Decimal(str(effective_rate)),
            currency=currency or source_currency or "USD",
            description=description,
        )

    async def _get(self, commission_id: str) -> Commission:
        commission = await self.commission_repo.get_by_id(commission_id, for_update=True)
        if not commission:
            raise CommissionNotFoundError(f"Commission {commission_id} not found")
        return commission

    async def _emit(self, event_type: EventType, commission: Commission, **extra) -> None:
        payload = {
            "consultant_id": commission.consultant_id,
            "status": commission.status.value,
            "amount": str(commission.amount),
            "currency": commission.currency,
        }
        payload.update(extra)
        await self.outbox_repo.add(OutboxEvent.build(event_type, COMMISSION_REFERENCE, commission.id, payload))

    async def _credit(self, commission: Commission, created_by: Optional[str] = None) -> None:
        account = await self.account_repo.get_or_create(AccountOwnerType.CONSULTANT, commission.consultant_id)
        await self.ledger.post_credit(
            account.id,
            commission.amount,
            TransactionType.COMMISSION_EARNED,
            PostingContext(
                reference_type=COMMISSION_REFERENCE,
                reference_id=commission.id,
                description=commission.description or f"Commission {commission.type.value}",
                created_by=created_by,
            ),
        )

    async def _debit(self, commission: Commission, reason: Optional[str], created_by: Optional[str]) -> None:
        account = await self.account_repo.get_or_create(AccountOwnerType.CONSULTANT, commission.consultant_id)
        await self.ledger.post_debit(
            account.id,
            commission.amount,
            TransactionType.COMMISSION_CLAWBACK,
            PostingContext(
                reference_type=COMMISSION_REFERENCE,
                reference_id=commission.id,
                description=f"Commission clawback: {reason}" if reason else "Commission clawback",
                created_by=created_by,
            ),
        )

    async def create_pending(self, commission: Commission) -> Commission:
        commission = await self.commission_repo.create(commission)
        await self._emit(EventType.COMMISSION_CREATED, commission)
        logger.info(f"Created PENDING commission {commission.id} of {commission.amount} {commission.currency}")
        return commission

    async def create_confirmed(self, commission: Commission, created_by: Optional[str] = None) -> Commission:
        """Persist a commission as CONFIRMED and credit the consultant in the same transaction"""
        commission.transition_to(CommissionStatus.CONFIRMED, "confirm")
        commission = await self.commission_repo.create(commission)
        await self._credit(commission, created_by)
        await self._emit(EventType.COMMISSION_CONFIRMED, commission)
        logger.info(f"Awarded commission {commission.id}: {commission.amount} {commission.currency}")
        return commission

    async def _lock_source(self, consultant_id: str, job_id: Optional[str], subscription_id: Optional[str]) -> None:
        """Row lock that serialises awards for the same source"""
        if job_id:
            if not await self.job_repo.get_by_id(job_id, for_update=True):
                raise JobNotFoundError(f"Job {job_id} not found")
        elif subscription_id:
            if not await self.subscription_repo.get_by_id(subscription_id, for_update=True):
                raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
        else:
            account = await self.account_repo.get_or_create(AccountOwnerType.CONSULTANT, consultant_id)
            await self.account_repo.get_by_id(account.id, for_update=True)

    async def award(
        self,
        consultant_id: str,
        commission_type: CommissionType,
        job_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        amount: Optional[Decimal] = None,
        rate: Optional[Decimal] = None,
        currency: Optional[str] = None,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Tuple[Commission, bool]:
        """
        Award a CONFIRMED commission once per (consultant, type, job, subscription)

        The source row is locked before the idempotency lookup, so concurrent
        awards for the same source queue behind each other and the second one
        finds the first.

        Returns:
            (commission, created) where created is False for an existing live commission
        """
        await self._lock_source(consultant_id, job_id, subscription_id)

        existing = await self.commission_repo.find_live(consultant_id, commission_type, job_id, subscription_id)
        if existing:
            logger.info(f"Commission already awarded for this source: {existing.id}")
            return existing, False

        commission = await self.build_commission(
            consultant_id,
            commission_type,
            job_id=job_id,
            subscription_id=subscription_id,
            amount=amount,
            rate=rate,
            currency=currency,
            description=description,
        )
        return await self.create_confirmed(commission, created_by=created_by), True

    async def confirm(self, commission_id: str, created_by: Optional[str] = None) -> Commission:
        commission = await self._get(commission_id)
        if commission.status == CommissionStatus.CONFIRMED:
            return commission
        if commission.status != CommissionStatus.PENDING:
            raise InvalidStateTransitionError("commission", commission.status.value, "confirm")

        commission.transition_to(CommissionStatus.CONFIRMED, "confirm")
        await self.commission_repo.update(commission)
        await self._credit(commission, created_by)
        await self._emit(EventType.COMMISSION_CONFIRMED, commission)
        logger.info(f"Confirmed commission {commission.id}, credited {commission.amount}")
        return commission

    async def mark_as_paid(self, commission_id: str) -> Commission:
        commission = await self._get(commission_id)
        if commission.status != CommissionStatus.CONFIRMED:
            raise InvalidStateTransitionError("commission", commission.status.value, "mark as paid")

        commission.transition_to(CommissionStatus.PAID, "mark as paid")
        await self.commission_repo.update(commission)
        await self._emit(EventType.COMMISSION_PAID, commission)
        return commission

    async def dispute(self, commission_id: str, reason: str) -> Commission:
        commission = await self._get(commission_id)
        commission.transition_to(CommissionStatus.DISPUTED, "dispute")
        commission.append_note(f"Disputed: {reason}")
        await self.commission_repo.update(commission)
        await self._emit(EventType.COMMISSION_DISPUTED, commission, reason=reason)
        logger.info(f"Commission {commission.id} disputed: {reason}")
        return commission

    async def resolve_dispute(
        self,
        commission_id: str,
        resolution: DisputeResolution,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Commission:
        commission = await self._get(commission_id)
        if commission.status != CommissionStatus.DISPUTED:
            raise InvalidStateTransitionError("commission", commission.status.value, "resolve dispute for")

        if resolution == DisputeResolution.INVALID:
            return await self._claw_back(commission, notes or "Dispute resolved as invalid", created_by)

        commission.transition_to(CommissionStatus.CONFIRMED, "restore")
        commission.append_note(f"Dispute resolved as valid: {notes}" if notes else "Dispute resolved as valid")
        await self.commission_repo.update(commission)
        await self._emit(EventType.COMMISSION_CONFIRMED, commission, resolution=resolution.value)
        return commission

    async def clawback(self, commission_id: str, reason: str, created_by: Optional[str] = None) -> Commission:
        commission = await self._get(commission_id)
        return await self._claw_back(commission, reason, created_by)

    async def _claw_back(self, commission: Commission, reason: str, created_by: Optional[str]) -> Commission:
        # Nothing was credited for a PENDING commission: cancel it instead
        if commission.status == CommissionStatus.PENDING:
            commission.transition_to(CommissionStatus.CANCELLED, "clawback")
            commission.append_note(f"Cancelled: {reason}")
            await self.commission_repo.update(commission)
            await self._emit(EventType.COMMISSION_CANCELLED, commission, reason=reason)
            logger.info(f"Commission {commission.id} cancelled before confirmation: {reason}")
            return commission

        commission.transition_to(CommissionStatus.CLAWBACK, "claw back")
        commission.append_note(f"Clawback: {reason}")
        await self.commission_repo.update(commission)
        await self._debit(commission, reason, created_by)
        await self._emit(EventType.COMMISSION_CLAWED_BACK, commission, reason=reason)
        logger.warning(f"Commission {commission.id} clawed back ({commission.amount}): {reason}")
        return commission
