"""Subscription Use Cases

Subscription purchase, quota consumption, renewal and cancellation.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.consultant_repository import ConsultantRepository
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.price_book_selection import PriceBookSelectionService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.commission import CommissionType
from src.domain.company import Company
from src.domain.errors import (
    CompanyNotFoundError,
    InvalidStateTransitionError,
    QuotaExhaustedError,
    SubscriptionNotFoundError,
)
from src.domain.money import to_money
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.subscription import (
    PLAN_JOB_QUOTAS,
    Subscription,
    SubscriptionStatus,
    cycle_end,
)
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType
from .dtos import CreateSubscriptionCommandDTO, SubscriptionDTO

logger = logging.getLogger(__name__)

SUBSCRIPTION_REFERENCE = "SUBSCRIPTION"


def _charge_amount(subscription: Subscription) -> Decimal:
    """Base price less the subscription discount"""
    discount = Decimal(str(subscription.discount_percent or 0))
    return to_money(subscription.base_price * (Decimal("100") - discount) / Decimal("100"))


def _event(event_type: EventType, subscription: Subscription, **extra) -> OutboxEvent:
    payload = {
        "company_id": subscription.company_id,
        "plan_type": subscription.plan_type.value,
        "status": subscription.status.value,
        "base_price": str(subscription.base_price),
        "currency": subscription.currency,
    }
    payload.update(extra)
    return OutboxEvent.build(event_type, SUBSCRIPTION_REFERENCE, subscription.id, payload)


async def _charge_wallet(
    account_repo: VirtualAccountRepository,
    ledger: VirtualLedger,
    company: Company,
    subscription: Subscription,
    created_by: Optional[str],
    description: str,
):
    account = await account_repo.get_or_create(AccountOwnerType.COMPANY, company.id)
    return await ledger.post_debit(
        account.id,
        _charge_amount(subscription),
        TransactionType.SUBSCRIPTION_PURCHASE,
        PostingContext(
            reference_type=SUBSCRIPTION_REFERENCE,
            reference_id=subscription.id,
            description=description,
            created_by=created_by,
            pricing_peg=subscription.pricing_peg or company.pricing_peg,
            billing_currency=subscription.currency,
            price_book_id=subscription.price_book_id,
            price_book_version=subscription.price_book_version,
        ),
    )


class CreateSubscription:
    """
    Use Case: Start a subscription for a company

    Business Rules:
    1. A company has at most one ACTIVE subscription
    2. Price comes from product SUB_<plan> of the effective price book unless given
    3. Quota comes from the plan (PAYG 0, SMALL 5, MEDIUM 25, LARGE 50,
       ENTERPRISE/RPO unlimited) unless given
    4. end_date = renewal_date = start + 1 month (MONTHLY) or + 1 year
    5. jobs_used starts at 0, prepaid_balance at base_price
    6. Optional wallet payment is a SUBSCRIPTION_PURCHASE debit validated
       against the currency lock
    7. The attributed sales consultant gets a PENDING SUBSCRIPTION_SALE commission

    Flow:
    1. Load company, resolve price
    2. In one transaction: create subscription, charge wallet, create
       commission, emit SUBSCRIPTION_CREATED
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        company_repo: CompanyRepository,
        consultant_repo: ConsultantRepository,
        account_repo: VirtualAccountRepository,
        price_book_service: PriceBookSelectionService,
        ledger: VirtualLedger,
        commission_workflow: CommissionWorkflow,
        outbox_repo: OutboxRepository,
        default_currency: str = "USD",
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.company_repo = company_repo
        self.consultant_repo = consultant_repo
        self.account_repo = account_repo
        self.price_book_service = price_book_service
        self.ledger = ledger
        self.commission_workflow = commission_workflow
        self.outbox_repo = outbox_repo
        self.default_currency = default_currency

    async def execute(self, command: CreateSubscriptionCommandDTO) -> SubscriptionDTO:
        # Step 1: Company and price
        company = await self.company_repo.get_by_id(command.company_id)
        if not company:
            raise CompanyNotFoundError(f"Company {command.company_id} not found")

        price_book_id = None
        price_book_version = None
        if command.base_price is None:
            quote = await self.price_book_service.get_subscription_price(company.id, command.plan_type.value)
            base_price = quote.price
            currency = quote.currency
            price_book_id = quote.price_book.id
            price_book_version = quote.price_book.version
        else:
            base_price = to_money(command.base_price)
            currency = command.currency or company.billing_currency or self.default_currency

        job_quota = command.job_quota
        if job_quota is None:
            job_quota = PLAN_JOB_QUOTAS.get(command.plan_type)

        start = command.start_date or datetime.utcnow()
        end = cycle_end(start, command.billing_cycle)
        sales_agent_id = command.sales_agent_id or company.sales_agent_id

        # Step 2: Persist, charge, attribute
        async def work():
            subscription = await self.subscription_repo.get_active_by_company(company.id, for_update=True)
            if subscription:
                raise InvalidStateTransitionError("subscription", subscription.status.value, "create another")

            subscription = await self.subscription_repo.create(
                Subscription(
                    company_id=company.id,
                    name=command.name or f"{command.plan_type.value.title()} plan",
                    plan_type=command.plan_type,
                    base_price=base_price,
                    currency=currency,
                    billing_cycle=command.billing_cycle,
                    discount_percent=command.discount_percent,
                    start_date=start,
                    end_date=end,
                    renewal_date=end,
                    job_quota=job_quota,
                    jobs_used=0,
                    prepaid_balance=base_price,
                    auto_renew=command.auto_renew,
                    sales_agent_id=sales_agent_id,
                    price_book_id=price_book_id,
                    pricing_peg=company.pricing_peg,
                    price_book_version=price_book_version,
                )
            )

            if command.pay_from_wallet:
                await _charge_wallet(
                    self.account_repo,
                    self.ledger,
                    company,
                    subscription,
                    command.created_by,
                    f"Subscription: {subscription.name}",
                )

            if sales_agent_id:
                await self._attribute_sale(subscription, sales_agent_id)

            await self.outbox_repo.add(_event(EventType.SUBSCRIPTION_CREATED, subscription))
            return subscription

        subscription = await self.uow.run(work)
        logger.info(
            f"Created {subscription.plan_type.value} subscription {subscription.id} for company "
            f"{subscription.company_id}: {subscription.base_price} {subscription.currency}"
        )
        return SubscriptionDTO.model_validate(subscription)

    async def _attribute_sale(self, subscription: Subscription, sales_agent_id: str) -> None:
        consultant = await self.consultant_repo.get_by_id(sales_agent_id)
        if not consultant:
            logger.warning(f"Sales agent {sales_agent_id} is not a consultant; no commission for {subscription.id}")
            return

        commission = await self.commission_workflow.build_commission(
            consultant.id,
            CommissionType.SUBSCRIPTION_SALE,
            subscription_id=subscription.id,
            description=f"Subscription sale: {subscription.name}",
        )
        await self.commission_workflow.create_pending(commission)


class UseSubscriptionQuota:
    """
    Use Case: Consume one job slot of the company's active subscription

    The subscription row is locked, so concurrent postings cannot push
    jobs_used past job_quota.
    """

    def __init__(self, uow: UnitOfWork, subscription_repo: SubscriptionRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo

    async def execute(self, company_id: str) -> SubscriptionDTO:
        async def work():
            subscription = await self.subscription_repo.get_active_by_company(company_id, for_update=True)
            if not subscription:
                raise SubscriptionNotFoundError(f"No active subscription for company {company_id}")
            if not subscription.has_quota_left:
                raise QuotaExhaustedError(
                    f"Job quota exhausted: {subscription.jobs_used}/{subscription.job_quota} jobs used"
                )

            subscription.jobs_used += 1
            return await self.subscription_repo.update(subscription)

        return SubscriptionDTO.model_validate(await self.uow.run(work))


class RenewSubscription:
    """
    Use Case: Extend an ACTIVE subscription by one billing cycle

    The new period starts at the previous end date. jobs_used is a lifetime
    counter and is not reset; prepaid_balance grows by base_price.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        company_repo: CompanyRepository,
        account_repo: VirtualAccountRepository,
        ledger: VirtualLedger,
        outbox_repo: OutboxRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.company_repo = company_repo
        self.account_repo = account_repo
        self.ledger = ledger
        self.outbox_repo = outbox_repo

    async def execute(
        self, subscription_id: str, pay_from_wallet: bool = False, created_by: Optional[str] = None
    ) -> SubscriptionDTO:
        async def work():
            subscription = await _get_subscription(self.subscription_repo, subscription_id)
            if subscription.status != SubscriptionStatus.ACTIVE:
                raise InvalidStateTransitionError("subscription", subscription.status.value, "renew")

            start = subscription.end_date or datetime.utcnow()
            end = cycle_end(start, subscription.billing_cycle)
            subscription.end_date = end
            subscription.renewal_date = end
            subscription.prepaid_balance = subscription.prepaid_balance + subscription.base_price

            if pay_from_wallet:
                company = await self.company_repo.get_by_id(subscription.company_id)
                if not company:
                    raise CompanyNotFoundError(f"Company {subscription.company_id} not found")
                await _charge_wallet(
                    self.account_repo,
                    self.ledger,
                    company,
                    subscription,
                    created_by,
                    f"Subscription renewal: {subscription.name}",
                )

            subscription = await self.subscription_repo.update(subscription)
            await self.outbox_repo.add(
                _event(EventType.SUBSCRIPTION_RENEWED, subscription, end_date=end.isoformat())
            )
            return subscription

        subscription = await self.uow.run(work)
        logger.info(f"Renewed subscription {subscription.id} until {subscription.end_date.isoformat()}")
        return SubscriptionDTO.model_validate(subscription)


class CancelSubscription:

    def __init__(self, uow: UnitOfWork, subscription_repo: SubscriptionRepository, outbox_repo: OutboxRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.outbox_repo = outbox_repo

    async def execute(self, subscription_id: str, reason: Optional[str] = None) -> SubscriptionDTO:
        async def work():
            subscription = await _get_subscription(self.subscription_repo, subscription_id)
            if subscription.status != SubscriptionStatus.ACTIVE:
                raise InvalidStateTransitionError("subscription", subscription.status.value, "cancel")

            subscription.status = SubscriptionStatus.CANCELLED
            subscription.auto_renew = False
            subscription = await self.subscription_repo.update(subscription)
            await self.outbox_repo.add(_event(EventType.SUBSCRIPTION_CANCELLED, subscription, reason=reason))
            return subscription

        subscription = await self.uow.run(work)
        logger.info(f"Cancelled subscription {subscription.id}")
        return SubscriptionDTO.model_validate(subscription)


async def _get_subscription(repo: SubscriptionRepository, subscription_id: str) -> Subscription:
    subscription = await repo.get_by_id(subscription_id, for_update=True)
    if not subscription:
        raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
    return subscription
