"""Unit tests for subscription use cases"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.price_book_selection import PriceQuote, ResolutionSource
from src.app.use_cases.billing.dtos import CreateSubscriptionCommandDTO
from src.app.use_cases.billing.subscriptions import (
    CancelSubscription,
    CreateSubscription,
    RenewSubscription,
    UseSubscriptionQuota,
)
from src.domain.company import Company
from src.domain.consultant import Consultant
from src.domain.errors import InvalidStateTransitionError, QuotaExhaustedError, SubscriptionNotFoundError
from src.domain.outbox_event import EventType
from src.domain.price_book import PriceBook, PriceTier, Product, ProductCategory
from src.domain.subscription import BillingCycle, Subscription, SubscriptionPlanType, SubscriptionStatus
from src.domain.virtual_account import AccountOwnerType, VirtualAccount
from src.domain.virtual_transaction import TransactionType


@pytest.fixture
def company():
    return Company(id="company_1", name="Acme", pricing_peg="AUD", billing_currency="AUD")


@pytest.fixture
def company_repo(company):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=company)
    return repo


@pytest.fixture
def subscription_repo():
    repo = MagicMock()
    repo.get_active_by_company = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda s: s)
    repo.update = AsyncMock(side_effect=lambda s: s)
    return repo


@pytest.fixture
def consultant_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def account_repo():
    repo = MagicMock()
    repo.get_or_create = AsyncMock(
        return_value=VirtualAccount(id="acc_company", owner_type=AccountOwnerType.COMPANY, owner_id="company_1")
    )
    return repo


@pytest.fixture
def price_book_service():
    book = PriceBook(id="book_au", name="Australia", pricing_peg="AUD", billing_currency="AUD", version="2026-Q1")
    product = Product(id="p_small", code="SUB_SMALL", name="Small", category=ProductCategory.SUBSCRIPTION)
    tier = PriceTier(price_book_id=book.id, product_id=product.id, name="Monthly", unit_price=Decimal("450.00"))
    service = MagicMock()
    service.get_subscription_price = AsyncMock(
        return_value=PriceQuote(Decimal("450.00"), "AUD", tier, product, book, ResolutionSource.REGIONAL)
    )
    return service


@pytest.fixture
def ledger():
    ledger = MagicMock()
    ledger.post_debit = AsyncMock()
    return ledger


@pytest.fixture
def commission_workflow():
    workflow = MagicMock()
    workflow.build_commission = AsyncMock(side_effect=lambda *args, **kwargs: MagicMock())
    workflow.create_pending = AsyncMock()
    return workflow


@pytest.fixture
def create_subscription(
    mock_uow, subscription_repo, company_repo, consultant_repo, account_repo,
    price_book_service, ledger, commission_workflow, mock_outbox_repo,
):
    return CreateSubscription(
        uow=mock_uow,
        subscription_repo=subscription_repo,
        company_repo=company_repo,
        consultant_repo=consultant_repo,
        account_repo=account_repo,
        price_book_service=price_book_service,
        ledger=ledger,
        commission_workflow=commission_workflow,
        outbox_repo=mock_outbox_repo,
    )


def active_subscription(**overrides):
    values = dict(
        id="sub_1",
        company_id="company_1",
        name="Small plan",
        plan_type=SubscriptionPlanType.SMALL,
        base_price=Decimal("450.00"),
        currency="AUD",
        start_date=datetime(2026, 1, 31),
        end_date=datetime(2026, 2, 28),
        renewal_date=datetime(2026, 2, 28),
        job_quota=5,
        jobs_used=0,
        prepaid_balance=Decimal("450.00"),
    )
    values.update(overrides)
    return Subscription(**values)


@pytest.mark.asyncio
class TestCreateSubscription:

    async def test_price_and_quota_from_plan(self, create_subscription, mock_outbox_repo, ledger):
        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1", plan_type=SubscriptionPlanType.SMALL, start_date=datetime(2026, 1, 31)
            )
        )

        assert result.base_price == Decimal("450.00")
        assert result.currency == "AUD"
        assert result.job_quota == 5
        assert result.jobs_used == 0
        assert result.prepaid_balance == Decimal("450.00")
        assert result.end_date == datetime(2026, 2, 28)
        assert result.renewal_date == result.end_date
        assert result.price_book_version == "2026-Q1"
        assert result.status == SubscriptionStatus.ACTIVE
        ledger.post_debit.assert_not_awaited()
        assert mock_outbox_repo.add.await_args.args[0].event_type == EventType.SUBSCRIPTION_CREATED

    async def test_enterprise_quota_is_unlimited(self, create_subscription):
        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(company_id="company_1", plan_type=SubscriptionPlanType.ENTERPRISE)
        )

        assert result.job_quota is None

    async def test_annual_cycle(self, create_subscription):
        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1",
                plan_type=SubscriptionPlanType.SMALL,
                billing_cycle=BillingCycle.ANNUAL,
                start_date=datetime(2026, 3, 1),
            )
        )

        assert result.end_date == datetime(2027, 3, 1)

    async def test_wallet_payment_charges_discounted_price(self, create_subscription, ledger):
        await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1",
                plan_type=SubscriptionPlanType.SMALL,
                discount_percent=Decimal("10"),
                pay_from_wallet=True,
            )
        )

        args = ledger.post_debit.await_args.args
        assert args[0] == "acc_company"
        assert args[1] == Decimal("405.00")
        assert args[2] == TransactionType.SUBSCRIPTION_PURCHASE
        assert args[3].billing_currency == "AUD"

    async def test_explicit_price_skips_price_book(self, create_subscription, price_book_service):
        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1", plan_type=SubscriptionPlanType.CUSTOM, base_price=Decimal("999.999")
            )
        )

        assert result.base_price == Decimal("1000.00")
        assert result.currency == "AUD"
        price_book_service.get_subscription_price.assert_not_awaited()

    async def test_second_active_subscription_rejected(self, create_subscription, subscription_repo, mock_uow):
        subscription_repo.get_active_by_company = AsyncMock(return_value=active_subscription())

        with pytest.raises(InvalidStateTransitionError):
            await create_subscription.execute(
                CreateSubscriptionCommandDTO(company_id="company_1", plan_type=SubscriptionPlanType.MEDIUM)
            )

        subscription_repo.create.assert_not_awaited()
        mock_uow.rollback.assert_awaited_once()

    async def test_sales_agent_gets_pending_commission(
        self, create_subscription, consultant_repo, commission_workflow
    ):
        consultant_repo.get_by_id = AsyncMock(
            return_value=Consultant(
                id="consultant_1", region_id="region_1", first_name="Ana", last_name="Lee", email="ana@example.com"
            )
        )

        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1", plan_type=SubscriptionPlanType.SMALL, sales_agent_id="consultant_1"
            )
        )

        kwargs = commission_workflow.build_commission.await_args.kwargs
        assert kwargs["subscription_id"] == result.id
        commission_workflow.create_pending.assert_awaited_once()

    async def test_unknown_sales_agent_is_skipped(self, create_subscription, commission_workflow):
        result = await create_subscription.execute(
            CreateSubscriptionCommandDTO(
                company_id="company_1", plan_type=SubscriptionPlanType.SMALL, sales_agent_id="not_a_consultant"
            )
        )

        assert result.sales_agent_id == "not_a_consultant"
        commission_workflow.build_commission.assert_not_awaited()


@pytest.mark.asyncio
class TestUseSubscriptionQuota:

    async def test_consumes_one_slot(self, mock_uow, subscription_repo):
        subscription_repo.get_active_by_company = AsyncMock(return_value=active_subscription(jobs_used=4))

        result = await UseSubscriptionQuota(mock_uow, subscription_repo).execute("company_1")

        assert result.jobs_used == 5

    async def test_exhausted_quota(self, mock_uow, subscription_repo):
        subscription_repo.get_active_by_company = AsyncMock(return_value=active_subscription(jobs_used=5))

        with pytest.raises(QuotaExhaustedError):
            await UseSubscriptionQuota(mock_uow, subscription_repo).execute("company_1")

        subscription_repo.update.assert_not_awaited()

    async def test_unlimited_quota(self, mock_uow, subscription_repo):
        subscription_repo.get_active_by_company = AsyncMock(
            return_value=active_subscription(job_quota=None, jobs_used=500)
        )

        result = await UseSubscriptionQuota(mock_uow, subscription_repo).execute("company_1")

        assert result.jobs_used == 501

    async def test_no_active_subscription(self, mock_uow, subscription_repo):
        with pytest.raises(SubscriptionNotFoundError):
            await UseSubscriptionQuota(mock_uow, subscription_repo).execute("company_1")


@pytest.mark.asyncio
class TestRenewAndCancel:

    async def test_renew_extends_from_previous_end(
        self, mock_uow, subscription_repo, company_repo, account_repo, ledger, mock_outbox_repo
    ):
        subscription = active_subscription(jobs_used=3)
        subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await RenewSubscription(
            mock_uow, subscription_repo, company_repo, account_repo, ledger, mock_outbox_repo
        ).execute("sub_1")

        assert result.end_date == datetime(2026, 3, 28)
        assert result.renewal_date == datetime(2026, 3, 28)
        assert result.prepaid_balance == Decimal("900.00")
        assert result.jobs_used == 3
        assert mock_outbox_repo.add.await_args.args[0].event_type == EventType.SUBSCRIPTION_RENEWED

    async def test_cancelled_subscription_cannot_renew(
        self, mock_uow, subscription_repo, company_repo, account_repo, ledger, mock_outbox_repo
    ):
        subscription_repo.get_by_id = AsyncMock(
            return_value=active_subscription(status=SubscriptionStatus.CANCELLED)
        )

        with pytest.raises(InvalidStateTransitionError):
            await RenewSubscription(
                mock_uow, subscription_repo, company_repo, account_repo, ledger, mock_outbox_repo
            ).execute("sub_1")

    async def test_cancel(self, mock_uow, subscription_repo, mock_outbox_repo):
        subscription_repo.get_by_id = AsyncMock(return_value=active_subscription())

        result = await CancelSubscription(mock_uow, subscription_repo, mock_outbox_repo).execute("sub_1", "Closing")

        assert result.status == SubscriptionStatus.CANCELLED
        assert result.auto_renew is False
