"""Salary Band Service

Decides whether a job falls into executive-search pricing and which
band prices it.
"""

import logging
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.price_book_repository import PriceBookRepository
from src.app.services.price_book_selection import PriceBookSelectionService
from src.domain.errors import CompanyNotFoundError, NoTierFoundError, ProductNotFoundError
from src.domain.job import EXECUTIVE_SEARCH, SERVICE_PACKAGE_PRODUCTS
from src.domain.price_book import EXECUTIVE_BAND_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_EXECUTIVE_THRESHOLDS = {
    "USD": Decimal("100000"),
    "AUD": Decimal("150000"),
    "GBP": Decimal("90000"),
    "EUR": Decimal("90000"),
    "INR": Decimal("2500000"),
}


class ExecutiveBand(NamedTuple):
    band: str
    band_name: str
    price: Decimal
    currency: str
    salary_min: Decimal
    salary_max: Optional[Decimal]
    product_code: str


class JobBand(NamedTuple):
    is_executive_search: bool
    band: Optional[ExecutiveBand] = None


class JobQuote(NamedTuple):
    price: Decimal
    currency: str
    product_code: str
    band: Optional[str]
    price_book_id: str
    price_book_version: str
    override_id: Optional[str] = None
    is_executive_search: bool = False


class SalaryBandService:

    def __init__(
        self,
        company_repo: CompanyRepository,
        price_book_repo: PriceBookRepository,
        selection_service: PriceBookSelectionService,
        thresholds: Optional[Dict[str, Decimal]] = None,
        default_threshold: Decimal = Decimal("100000"),
        default_version: str = "2026-Q1",
    ):
        self.company_repo = company_repo
        self.price_book_repo = price_book_repo
        self.selection_service = selection_service
        self.thresholds = {
            peg: Decimal(str(value)) for peg, value in (thresholds or DEFAULT_EXECUTIVE_THRESHOLDS).items()
        }
        self.default_threshold = Decimal(str(default_threshold))
        self.default_version = default_version

    def threshold_for(self, pricing_peg: Optional[str]) -> Decimal:
        return self.thresholds.get(pricing_peg or "USD", self.default_threshold)

    async def list_executive_bands(self, company_id: str) -> List[ExecutiveBand]:
        """All executive-search bands of the effective book, lowest first"""
        book = await self.selection_service.get_effective_price_book(company_id)
        rows = await self.price_book_repo.get_tiers_with_products(book.id, EXECUTIVE_BAND_PREFIX)
        rows = sorted(rows, key=lambda row: row[0].salary_band_min or Decimal("0"))
        return [
            ExecutiveBand(
                band=tier.band_name or product.code,
                band_name=tier.band_name or tier.name,
                price=tier.unit_price,
                currency=book.charge_currency,
                salary_min=tier.salary_band_min or Decimal("0"),
                salary_max=tier.salary_band_max,
                product_code=product.code,
            )
            for tier, product in rows
        ]

    async def get_executive_search_band(self, company_id: str, salary: Decimal) -> ExecutiveBand:
        """
        Band whose salary range contains `salary`

        The highest matching band wins; a salary outside every range gets
        the highest band.

        Raises:
            NoTierFoundError: The effective book has no executive-search bands
        """
        bands = await self.list_executive_bands(company_id)
        if not bands:
            logger.error(f"No executive search bands configured for company {company_id}")
            raise NoTierFoundError("No executive search bands configured")

        for band in reversed(bands):
            if salary >= band.salary_min and (band.salary_max is None or salary <= band.salary_max):
                return band
        return bands[-1]

    async def determine_job_band(self, company_id: str, salary_max: Decimal) -> JobBand:
        company = await self.company_repo.get_by_id(company_id)
        if not company:
            raise CompanyNotFoundError(f"Company {company_id} not found")

        if salary_max < self.threshold_for(company.pricing_peg):
            return JobBand(is_executive_search=False)

        band = await self.get_executive_search_band(company_id, salary_max)
        logger.info(f"Job for company {company_id} with salary {salary_max} priced as {band.product_code}")
        return JobBand(is_executive_search=True, band=band)

    async def price_job(
        self, company_id: str, salary_max: Optional[Decimal], service_package: str
    ) -> JobQuote:
        """
        Price a paid job posting

        Executive search above the peg's salary threshold is priced by band;
        every other package (and executive search below the threshold) uses
        its standard recruitment product.

        Raises:
            ProductNotFoundError: Unknown service package
        """
        product_code = SERVICE_PACKAGE_PRODUCTS.get(service_package)
        if not product_code:
            raise ProductNotFoundError(f"Unknown service package: {service_package}")

        if service_package == EXECUTIVE_SEARCH and salary_max is not None:
            job_band = await self.determine_job_band(company_id, Decimal(str(salary_max)))
            if job_band.is_executive_search:
                resolved = await self.selection_service.resolve(company_id)
                return JobQuote(
                    price=job_band.band.price,
                    currency=job_band.band.currency,
                    product_code=job_band.band.product_code,
                    band=job_band.band.band,
                    price_book_id=resolved.price_book.id,
                    price_book_version=resolved.price_book.version or self.default_version,
                    override_id=resolved.override_id,
                    is_executive_search=True,
                )

        quote = await self.selection_service.get_price_for_product(company_id, product_code)
        return JobQuote(
            price=quote.price,
            currency=quote.currency,
            product_code=quote.product.code,
            band=quote.tier.band_name,
            price_book_id=quote.price_book.id,
            price_book_version=quote.price_book.version or self.default_version,
            override_id=quote.override_id,
        )
