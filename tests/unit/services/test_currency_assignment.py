"""Unit tests for CurrencyAssignmentService"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from src.app.services.currency_assignment import CurrencyAssignmentService
from src.domain.company import Company
from src.domain.country_pricing_map import CountryPricingMap
from src.domain.errors import CompanyNotFoundError, CurrencyLockedError, CurrencyMismatchError
from src.domain.outbox_event import EventType
from src.domain.pricing_audit_log import PricingAuditAction


@pytest.fixture
def company():
    return Company(id="company_1", name="Acme Pty Ltd")


@pytest.fixture
def company_repo(company):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=company)
    repo.update = AsyncMock(side_effect=lambda c: c)
    return repo


@pytest.fixture
def country_map_repo():
    mappings = {
        "AU": CountryPricingMap(country_code="AU", country_name="Australia", pricing_peg="AUD", billing_currency="AUD"),
        "GB": CountryPricingMap(country_code="GB", country_name="United Kingdom", pricing_peg="GBP", billing_currency="GBP"),
    }
    repo = MagicMock()
    repo.get_by_code = AsyncMock(side_effect=lambda code: mappings.get(code))
    repo.get_by_name = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def audit_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def override_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda override: override)
    return repo


@pytest.fixture
def service(company_repo, country_map_repo, audit_repo, override_repo, mock_outbox_repo):
    return CurrencyAssignmentService(company_repo, country_map_repo, audit_repo, override_repo, mock_outbox_repo)


@pytest.mark.asyncio
class TestAssign:

    async def test_assigns_from_country_code(self, service, company, audit_repo):
        result = await service.assign("company_1", "AU", actor_id="user_1")

        assert result.pricing_peg == "AUD"
        assert result.billing_currency == "AUD"
        assert result.is_locked is False
        assert company.country == "AU"
        entry = audit_repo.create.await_args.args[0]
        assert entry.action == PricingAuditAction.CURRENCY_ASSIGNED
        assert entry.new_billing_currency == "AUD"
        assert entry.actor_id == "user_1"

    async def test_assigns_from_country_name(self, service):
        result = await service.assign("company_1", "United Kingdom")

        assert result.pricing_peg == "GBP"

    async def test_unmapped_country_defaults_to_usd(self, service, company):
        result = await service.assign("company_1", "BR")

        assert result.pricing_peg == "USD"
        assert result.billing_currency == "USD"
        assert company.billing_currency == "USD"

    async def test_locked_company_cannot_change(self, service, company, company_repo):
        company.pricing_peg = "AUD"
        company.billing_currency = "AUD"
        company.currency_locked_at = datetime(2026, 1, 5)

        with pytest.raises(CurrencyLockedError):
            await service.assign("company_1", "GB")

        assert company.billing_currency == "AUD"
        company_repo.update.assert_not_awaited()

    async def test_unknown_company(self, service, company_repo):
        company_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(CompanyNotFoundError):
            await service.assign("nope", "AU")


@pytest.mark.asyncio
class TestLock:

    async def test_first_lock_sets_timestamp_and_emits_event(self, service, company, mock_outbox_repo):
        assert await service.lock_currency("company_1") is True

        assert company.currency_locked_at is not None
        event = mock_outbox_repo.add.await_args.args[0]
        assert event.event_type == EventType.CURRENCY_LOCKED

    async def test_second_lock_is_noop(self, service, company, mock_outbox_repo):
        locked_at = datetime(2026, 1, 5)
        company.currency_locked_at = locked_at

        assert await service.lock_currency("company_1") is False

        assert company.currency_locked_at == locked_at
        mock_outbox_repo.add.assert_not_awaited()

    async def test_validate_passes_when_unlocked(self, service):
        await service.validate_currency_lock("company_1", "EUR")

    async def test_validate_rejects_other_currency_when_locked(self, service, company):
        company.billing_currency = "AUD"
        company.currency_locked_at = datetime(2026, 1, 5)

        with pytest.raises(CurrencyMismatchError) as exc_info:
            await service.validate_currency_lock("company_1", "USD")

        assert exc_info.value.locked_currency == "AUD"
        assert exc_info.value.requested_currency == "USD"

    async def test_can_change_currency(self, service, company):
        assert await service.can_change_currency("company_1") is True
        company.currency_locked_at = datetime(2026, 1, 5)
        assert await service.can_change_currency("company_1") is False


@pytest.mark.asyncio
class TestEmergencyOverride:

    async def test_override_rewrites_and_unlocks(self, service, company, audit_repo, mock_outbox_repo):
        company.pricing_peg = "AUD"
        company.billing_currency = "AUD"
        company.currency_locked_at = datetime(2026, 1, 5)

        override = await service.emergency_override("company_1", "GBP", "GBP", "admin_1", "Relocated")

        assert company.pricing_peg == "GBP"
        assert company.billing_currency == "GBP"
        assert company.currency_locked_at is None
        assert override.created_by == "admin_1"
        entry = audit_repo.create.await_args.args[0]
        assert entry.action == PricingAuditAction.EMERGENCY_OVERRIDE
        assert entry.old_billing_currency == "AUD"
        assert entry.was_locked_at == datetime(2026, 1, 5)
        assert mock_outbox_repo.add.await_args.args[0].event_type == EventType.CURRENCY_OVERRIDDEN


@pytest.mark.asyncio
class TestCompanyCurrencies:

    async def test_defaults_when_unassigned(self, service):
        currencies = await service.get_company_currencies("company_1")

        assert currencies.pricing_peg == "USD"
        assert currencies.billing_currency == "USD"
        assert currencies.is_locked is False
