"""Price Book Selection Service

Resolves the effective price book for a company and looks up unit prices.

Resolution order:
1. Active EnterpriseOverride (bound price book, or its currency pair)
2. Company-assigned price book
3. Regional price book matching pricing_peg + billing_currency
4. Global fallback price book
"""

import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, NamedTuple, Optional
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.enterprise_override_repository import EnterpriseOverrideRepository
from src.app.repositories.price_book_repository import PriceBookRepository
from src.domain.errors import (
    CompanyNotFoundError,
    NoPriceBookFoundError,
    NoTierFoundError,
    ProductNotFoundError,
)
from src.domain.price_book import PriceBook, PriceTier, Product

logger = logging.getLogger(__name__)


class ResolutionSource(str, Enum):
    OVERRIDE = "OVERRIDE"
    COMPANY_ASSIGNED = "COMPANY_ASSIGNED"
    REGIONAL = "REGIONAL"
    GLOBAL_FALLBACK = "GLOBAL_FALLBACK"


class ResolvedPriceBook(NamedTuple):
    price_book: PriceBook
    source: ResolutionSource
    override_id: Optional[str] = None


class PriceQuote(NamedTuple):
    price: Decimal
    currency: str
    tier: PriceTier
    product: Product
    price_book: PriceBook
    source: ResolutionSource
    override_id: Optional[str] = None


def select_tier(
    tiers: List[PriceTier], quantity: int = 1, salary: Optional[Decimal] = None
) -> Optional[PriceTier]:
    """
    Pick the tier for a quantity or a salary

    With a salary the highest matching salary_band_min wins, otherwise the
    highest matching min_quantity wins.
    """
    if salary is not None:
        matching = [t for t in tiers if t.matches_salary(salary)]
        if not matching:
            return None
        return max(matching, key=lambda t: t.salary_band_min)

    matching = [t for t in tiers if t.matches_quantity(quantity)]
    if not matching:
        return None
    return max(matching, key=lambda t: t.min_quantity)


class PriceBookSelectionService:
    """
    Read-only resolution; safe to call inside or outside a transaction.
    """

    def __init__(
        self,
        company_repo: CompanyRepository,
        price_book_repo: PriceBookRepository,
        override_repo: EnterpriseOverrideRepository,
        default_currency: str = "USD",
    ):
        self.company_repo = company_repo
        self.price_book_repo = price_book_repo
        self.override_repo = override_repo
        self.default_currency = default_currency

    async def resolve(self, company_id: str, moment: Optional[datetime] = None) -> ResolvedPriceBook:
        """
        Resolve the effective price book and record which step produced it

        Args:
            company_id: Company identifier
            moment: Evaluation time (defaults to now)

        Returns:
            ResolvedPriceBook

        Raises:
            CompanyNotFoundError: Unknown company
            NoPriceBookFoundError: No step produced a book
        """
        moment = moment or datetime.utcnow()

        company = await self.company_repo.get_by_id(company_id)
        if not company:
            raise CompanyNotFoundError(f"Company {company_id} not found")

        pricing_peg = company.pricing_peg or self.default_currency
        billing_currency = company.billing_currency or self.default_currency

        # Step 1: Active enterprise override
        override = await self.override_repo.find_active(company_id, moment)
        if override:
            if override.price_book_id:
                book = await self.price_book_repo.get_by_id(override.price_book_id)
                if book:
                    logger.info(f"Using enterprise override price book {book.id} for company {company_id}")
                    return ResolvedPriceBook(book, ResolutionSource.OVERRIDE, override.id)
            if override.pins_currency_pair:
                pricing_peg = override.pricing_peg
                billing_currency = override.billing_currency

        # Step 2: Company-assigned price book
        if company.price_book_id:
            book = await self.price_book_repo.get_by_id(company.price_book_id)
            if book and book.is_active:
                return ResolvedPriceBook(
                    book, ResolutionSource.COMPANY_ASSIGNED, override.id if override else None
                )

        # Step 3: Regional price book for the currency pair
        book = await self.price_book_repo.find_regional(pricing_peg, billing_currency, moment)
        if book:
            return ResolvedPriceBook(book, ResolutionSource.REGIONAL, override.id if override else None)

        # Step 4: Global fallback
        book = await self.price_book_repo.find_global(moment)
        if book:
            logger.warning(f"Using global fallback price book {book.id} for company {company_id}")
            return ResolvedPriceBook(
                book, ResolutionSource.GLOBAL_FALLBACK, override.id if override else None
            )

        logger.error(
            f"No active price book found for company {company_id} "
            f"(peg: {pricing_peg}, currency: {billing_currency})"
        )
        raise NoPriceBookFoundError(
            f"No active price book found for company {company_id} "
            f"(peg: {pricing_peg}, currency: {billing_currency})"
        )

    async def get_effective_price_book(self, company_id: str) -> PriceBook:
        return (await self.resolve(company_id)).price_book

    async def get_price_for_product(
        self,
        company_id: str,
        product_code: str,
        quantity: int = 1,
        salary: Optional[Decimal] = None,
    ) -> PriceQuote:
        """
        Price one product for a company

        Executive-search products with a salary are matched by salary band,
        everything else by quantity range.

        Raises:
            ProductNotFoundError: Unknown or inactive product code
            NoTierFoundError: No tier of the effective book matches
        """
        resolved = await self.resolve(company_id)
        book = resolved.price_book

        product = await self.price_book_repo.get_product_by_code(product_code)
        if not product or not product.is_active:
            raise ProductNotFoundError(f"Product not found: {product_code}")

        tiers = await self.price_book_repo.get_tiers(book.id, product.id)
        by_salary = salary if (salary and product.is_executive_search) else None
        tier = select_tier(tiers, quantity=quantity, salary=by_salary)

        if not tier:
            message = (
                f"No price tier found for product {product_code} in price book {book.name} "
                f"(quantity: {quantity}, salary: {salary if salary is not None else 'N/A'})"
            )
            logger.error(message)
            raise NoTierFoundError(message)

        return PriceQuote(
            price=tier.unit_price,
            currency=book.charge_currency,
            tier=tier,
            product=product,
            price_book=book,
            source=resolved.source,
            override_id=resolved.override_id,
        )

    async def get_subscription_price(self, company_id: str, plan_type: str) -> PriceQuote:
        return await self.get_price_for_product(company_id, f"SUB_{plan_type}")
