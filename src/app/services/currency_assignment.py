"""Currency Assignment Service

Assigns a company's pricing peg and billing currency from its country,
locks them on the first payment and enforces the lock afterwards.

Rules:
- Currencies are assigned once; no dynamic FX conversion
- Once currency_locked_at is set the pair is immutable
- The only sanctioned bypass is an audited emergency override
"""

import logging
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.country_pricing_map_repository import CountryPricingMapRepository
from src.app.repositories.enterprise_override_repository import EnterpriseOverrideRepository
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.repositories.pricing_audit_log_repository import PricingAuditLogRepository
from src.domain.company import Company
from src.domain.enterprise_override import EnterpriseOverride
from src.domain.errors import CompanyNotFoundError, CurrencyLockedError, CurrencyMismatchError
from src.domain.outbox_event import EventType, OutboxEvent
from src.domain.pricing_audit_log import PricingAuditAction, PricingAuditLog

logger = logging.getLogger(__name__)

COUNTRY_NAME_TO_CODE = {
    "India": "IN", "United States": "US", "USA": "US", "America": "US",
    "Australia": "AU", "New Zealand": "NZ", "UK": "GB", "United Kingdom": "GB",
    "Ireland": "IE", "Germany": "DE", "France": "FR", "Netherlands": "NL", "Spain": "ES",
    "Italy": "IT", "Belgium": "BE", "Austria": "AT", "Finland": "FI", "Portugal": "PT",
    "Luxembourg": "LU", "Pakistan": "PK", "Sri Lanka": "LK", "Bangladesh": "BD",
    "Canada": "CA", "Singapore": "SG", "Hong Kong": "HK", "Japan": "JP",
    "South Korea": "KR", "Malaysia": "MY", "Thailand": "TH", "Philippines": "PH",
    "Indonesia": "ID", "Vietnam": "VN", "UAE": "AE", "United Arab Emirates": "AE",
    "Saudi Arabia": "SA", "Qatar": "QA", "Kuwait": "KW", "Bahrain": "BH", "Oman": "OM",
    "Israel": "IL", "Mexico": "MX", "Brazil": "BR", "Argentina": "AR", "Chile": "CL",
    "Colombia": "CO", "South Africa": "ZA", "Nigeria": "NG", "Kenya": "KE", "Egypt": "EG",
    "Switzerland": "CH", "Norway": "NO", "Sweden": "SE", "Denmark": "DK", "Poland": "PL",
}


class CompanyCurrencies(BaseModel):
    pricing_peg: str
    billing_currency: str
    is_locked: bool
    locked_at: Optional[datetime] = None


class CurrencyAssignmentService:
    """
    Runs inside the caller's unit of work; never commits.
    """

    def __init__(
        self,
        company_repo: CompanyRepository,
        country_map_repo: CountryPricingMapRepository,
        audit_repo: PricingAuditLogRepository,
        override_repo: EnterpriseOverrideRepository,
        outbox_repo: OutboxRepository,
        default_currency: str = "USD",
    ):
        self.company_repo = company_repo
        self.country_map_repo = country_map_repo
        self.audit_repo = audit_repo
        self.override_repo = override_repo
        self.outbox_repo = outbox_repo
        self.default_currency = default_currency

    async def _get_company(self, company_id: str, for_update: bool = False) -> Company:
        company = await self.company_repo.get_by_id(company_id, for_update=for_update)
        if not company:
            raise CompanyNotFoundError(f"Company {company_id} not found")
        return company

    async def resolve_country_code(self, country: Optional[str]) -> Optional[str]:
        """
        Turn a country name or code into an ISO code

        Two-letter values pass through upper-cased, known names map through
        the static table, anything else is looked up in the pricing map.
        """
        if not country:
            return None
        trimmed = country.strip()
        if len(trimmed) == 2:
            return trimmed.upper()
        code = COUNTRY_NAME_TO_CODE.get(trimmed)
        if code:
            return code
        mapping = await self.country_map_repo.get_by_name(trimmed)
        if mapping and mapping.is_active:
            return mapping.country_code
        return None

    async def get_company_currencies(self, company_id: str) -> CompanyCurrencies:
        company = await self._get_company(company_id)
        return CompanyCurrencies(
            pricing_peg=company.pricing_peg or self.default_currency,
            billing_currency=company.billing_currency or self.default_currency,
            is_locked=company.is_currency_locked,
            locked_at=company.currency_locked_at,
        )

    async def can_change_currency(self, company_id: str) -> bool:
        company = await self._get_company(company_id)
        return not company.is_currency_locked

    async def assign(self, company_id: str, country: str, actor_id: Optional[str] = None) -> CompanyCurrencies:
        """
        Assign currencies from the company's country

        Args:
            company_id: Company identifier
            country: ISO code or country name
            actor_id: Who triggered the assignment (audit)

        Returns:
            The assigned currency pair

        Raises:
            CompanyNotFoundError: Unknown company
            CurrencyLockedError: Currencies are already locked
        """
        # Step 1: Load company and refuse once locked
        company = await self._get_company(company_id, for_update=True)
        if company.is_currency_locked:
            raise CurrencyLockedError(
                "Currency is locked and cannot be changed. "
                f"Locked at: {company.currency_locked_at.isoformat()}"
            )

        # Step 2: Look up the country map, default to USD
        code = await self.resolve_country_code(country) or country.strip().upper()
        mapping = await self.country_map_repo.get_by_code(code)

        pricing_peg = self.default_currency
        billing_currency = self.default_currency
        if mapping and mapping.is_active:
            pricing_peg = mapping.pricing_peg
            billing_currency = mapping.billing_currency
        else:
            logger.warning(f"Country {code} not found in pricing map. Defaulting to {self.default_currency}.")

        # Step 3: Persist and audit
        old_peg, old_currency = company.pricing_peg, company.billing_currency
        company.pricing_peg = pricing_peg
        company.billing_currency = billing_currency
        company.country = code
        await self.company_repo.update(company)

        await self.audit_repo.create(
            PricingAuditLog(
                company_id=company.id,
                action=PricingAuditAction.CURRENCY_ASSIGNED,
                old_pricing_peg=old_peg,
                old_billing_currency=old_currency,
                new_pricing_peg=pricing_peg,
                new_billing_currency=billing_currency,
                actor_id=actor_id,
                reason=f"Assigned from country {code}",
            )
        )

        logger.info(
            f"Assigned currencies to company {company_id}: {pricing_peg} pricing, {billing_currency} billing"
        )
        return CompanyCurrencies(pricing_peg=pricing_peg, billing_currency=billing_currency, is_locked=False)

    async def lock_currency(self, company_id: str) -> bool:
        """
        Lock currencies after the first payment

        Returns:
            True if the lock was set now, False if it was already set
        """
        company = await self._get_company(company_id, for_update=True)
        if company.is_currency_locked:
            return False

        company.currency_locked_at = datetime.utcnow()
        await self.company_repo.update(company)
        await self.outbox_repo.add(
            OutboxEvent.build(
                EventType.CURRENCY_LOCKED,
                "COMPANY",
                company.id,
                {
                    "pricing_peg": company.pricing_peg,
                    "billing_currency": company.billing_currency,
                    "locked_at": company.currency_locked_at.isoformat(),
                },
            )
        )
        logger.info(f"Currency locked for company {company_id} at {company.currency_locked_at.isoformat()}")
        return True

    async def validate_currency_lock(self, company_id: str, expected_currency: str) -> None:
        """
        Raise CurrencyMismatchError when a locked company is charged in another currency
        """
        company = await self._get_company(company_id)
        if company.is_currency_locked and company.billing_currency != expected_currency:
            raise CurrencyMismatchError(company.billing_currency, expected_currency)

    async def emergency_override(
        self,
        company_id: str,
        new_pricing_peg: str,
        new_billing_currency: str,
        admin_id: str,
        reason: str,
    ) -> EnterpriseOverride:
        """
        Rewrite a company's currencies, clearing the lock

        Writes the override, the audit entry, the company update and the
        notification event together; the caller's transaction makes them
        all-or-nothing.
        """
        company = await self._get_company(company_id, for_update=True)
        now = datetime.utcnow()

        override = await self.override_repo.create(
            EnterpriseOverride(
                company_id=company.id,
                pricing_peg=new_pricing_peg,
                billing_currency=new_billing_currency,
                effective_from=now,
                created_by=admin_id,
                approved_by=admin_id,
                notes=reason,
            )
        )

        await self.audit_repo.create(
            PricingAuditLog(
                company_id=company.id,
                action=PricingAuditAction.EMERGENCY_OVERRIDE,
                old_pricing_peg=company.pricing_peg,
                old_billing_currency=company.billing_currency,
                new_pricing_peg=new_pricing_peg,
                new_billing_currency=new_billing_currency,
                was_locked_at=company.currency_locked_at,
                actor_id=admin_id,
                reason=reason,
                override_id=override.id,
            )
        )

        old_pair = f"{company.pricing_peg}/{company.billing_currency}"
        company.pricing_peg = new_pricing_peg
        company.billing_currency = new_billing_currency
        company.currency_locked_at = None
        await self.company_repo.update(company)

        await self.outbox_repo.add(
            OutboxEvent.build(
                EventType.CURRENCY_OVERRIDDEN,
                "COMPANY",
                company.id,
                {
                    "old": old_pair,
                    "new": f"{new_pricing_peg}/{new_billing_currency}",
                    "override_id": override.id,
                    "admin_id": admin_id,
                    "reason": reason,
                },
            )
        )

        logger.warning(
            f"Emergency currency override for company {company_id}: {old_pair} -> "
            f"{new_pricing_peg}/{new_billing_currency} by {admin_id} ({reason})"
        )
        return override
