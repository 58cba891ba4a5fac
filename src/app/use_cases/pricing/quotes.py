"""Price Quote Use Cases

Read-only price book resolution and product pricing.
"""

from decimal import Decimal
from typing import Optional
from src.app.services.currency_assignment import CurrencyAssignmentService
from src.app.services.price_book_selection import PriceBookSelectionService, PriceQuote
from src.app.services.salary_band import SalaryBandService
from src.domain.job import SELF_MANAGED
from .dtos import EffectivePriceBookDTO, JobPriceDTO, PriceBookDTO, PriceQuoteDTO


def _to_quote_dto(quote: PriceQuote) -> PriceQuoteDTO:
    return PriceQuoteDTO(
        price=quote.price,
        currency=quote.currency,
        product_code=quote.product.code,
        tier_id=quote.tier.id,
        tier_name=quote.tier.name,
        band_name=quote.tier.band_name,
        price_book_id=quote.price_book.id,
        price_book_name=quote.price_book.name,
        price_book_version=quote.price_book.version,
        source=quote.source,
        override_id=quote.override_id,
    )


class GetEffectivePriceBook:
    """
    Use Case: Effective price book of a company

    Resolution order: active enterprise override, company-assigned book,
    regional book for (pricing_peg, billing_currency), global fallback.
    """

    def __init__(self, selection_service: PriceBookSelectionService):
        self.selection_service = selection_service

    async def execute(self, company_id: str) -> EffectivePriceBookDTO:
        resolved = await self.selection_service.resolve(company_id)
        return EffectivePriceBookDTO(
            price_book=PriceBookDTO.model_validate(resolved.price_book),
            source=resolved.source,
            override_id=resolved.override_id,
        )


class GetPriceForProduct:
    """
    Use Case: Unit price of a product for a company

    Raises:
        ProductNotFoundError: Unknown product code
        NoPriceBookFoundError / NoTierFoundError: Pricing configuration gap
    """

    def __init__(self, selection_service: PriceBookSelectionService):
        self.selection_service = selection_service

    async def execute(
        self,
        company_id: str,
        product_code: str,
        quantity: int = 1,
        salary: Optional[Decimal] = None,
    ) -> PriceQuoteDTO:
        quote = await self.selection_service.get_price_for_product(
            company_id, product_code, quantity=quantity, salary=salary
        )
        return _to_quote_dto(quote)


class GetSubscriptionPrice:

    def __init__(self, selection_service: PriceBookSelectionService):
        self.selection_service = selection_service

    async def execute(self, company_id: str, plan_type: str) -> PriceQuoteDTO:
        quote = await self.selection_service.get_subscription_price(company_id, plan_type)
        return _to_quote_dto(quote)


class GetJobPrice:
    """Use Case: Price a job posting for its service package and salary"""

    def __init__(self, salary_band_service: SalaryBandService, currency_service: CurrencyAssignmentService):
        self.salary_band_service = salary_band_service
        self.currency_service = currency_service

    async def execute(
        self, company_id: str, salary_max: Optional[Decimal], service_package: str
    ) -> JobPriceDTO:
        if service_package == SELF_MANAGED:
            currencies = await self.currency_service.get_company_currencies(company_id)
            return JobPriceDTO(
                price=Decimal("0"),
                currency=currencies.billing_currency,
                service_package=service_package,
            )

        quote = await self.salary_band_service.price_job(company_id, salary_max, service_package)
        return JobPriceDTO(
            price=quote.price,
            currency=quote.currency,
            service_package=service_package,
            product_code=quote.product_code,
            band=quote.band,
            is_executive_search=quote.is_executive_search,
            price_book_id=quote.price_book_id,
            price_book_version=quote.price_book_version,
            override_id=quote.override_id,
        )
