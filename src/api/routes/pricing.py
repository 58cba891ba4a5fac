"""Pricing API Routes

FastAPI routes for company currencies and price quotes.
"""

from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from src.api.schemas.pricing_request import AssignCurrencyRequestSchema, EmergencyOverrideRequestSchema
from src.app.services.currency_assignment import CompanyCurrencies
from src.app.use_cases.pricing import (
    AssignCurrency,
    EffectivePriceBookDTO,
    EmergencyOverride,
    EmergencyOverrideCommandDTO,
    EnterpriseOverrideDTO,
    GetCompanyCurrencies,
    GetEffectivePriceBook,
    GetJobPrice,
    GetPriceForProduct,
    GetSubscriptionPrice,
    JobPriceDTO,
    PriceQuoteDTO,
)
from src.depends import LedgerContainer, get_container
from src.domain.job import SELF_MANAGED

router = APIRouter(prefix="/pricing", tags=["Pricing"])

_PRICING_UNAVAILABLE = {
    "description": "Pricing configuration missing",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "NO_PRICE_BOOK",
                    "message": "Pricing is currently unavailable. Please contact support.",
                }
            }
        }
    },
}


@router.get(
    "/companies/{company_id}/currencies",
    response_model=CompanyCurrencies,
    status_code=status.HTTP_200_OK,
)
async def get_company_currencies(company_id: str, container: LedgerContainer = Depends(get_container)):
    return await GetCompanyCurrencies(container.currency_service).execute(company_id)


@router.post(
    "/companies/{company_id}/currency",
    response_model=CompanyCurrencies,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Currency already locked",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CURRENCY_LOCKED",
                            "message": "Billing currency is locked after the first payment",
                        }
                    }
                }
            },
        }
    },
)
async def assign_currency(
    company_id: str,
    request: AssignCurrencyRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Assign pricing peg and billing currency from the company's country.

    Unmapped countries fall back to USD. Fails once the company's currency
    has been locked by its first payment.
    """
    use_case = AssignCurrency(container.uow, container.currency_service)
    return await use_case.execute(company_id, request.country, actor_id=request.actor_id)


@router.post(
    "/companies/{company_id}/currency/override",
    response_model=EnterpriseOverrideDTO,
    status_code=status.HTTP_201_CREATED,
)
async def emergency_override(
    company_id: str,
    request: EmergencyOverrideRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """Admin rewrite of a company's currencies, bypassing the lock. Always audited."""
    command = EmergencyOverrideCommandDTO(company_id=company_id, **request.model_dump())
    return await EmergencyOverride(container.uow, container.currency_service).execute(command)


@router.get(
    "/companies/{company_id}/price-book",
    response_model=EffectivePriceBookDTO,
    status_code=status.HTTP_200_OK,
    responses={500: _PRICING_UNAVAILABLE},
)
async def get_effective_price_book(company_id: str, container: LedgerContainer = Depends(get_container)):
    """
    Effective price book of a company.

    Resolution order: active enterprise override, the company's assigned
    book, the regional book of its currency pair, then the global book.
    """
    return await GetEffectivePriceBook(container.price_book_service).execute(company_id)


@router.get(
    "/companies/{company_id}/products/{product_code}/price",
    response_model=PriceQuoteDTO,
    status_code=status.HTTP_200_OK,
    responses={500: _PRICING_UNAVAILABLE},
)
async def get_product_price(
    company_id: str,
    product_code: str,
    quantity: int = Query(default=1, ge=1),
    salary: Optional[Decimal] = Query(default=None, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    use_case = GetPriceForProduct(container.price_book_service)
    return await use_case.execute(company_id, product_code, quantity=quantity, salary=salary)


@router.get(
    "/companies/{company_id}/subscriptions/{plan_type}/price",
    response_model=PriceQuoteDTO,
    status_code=status.HTTP_200_OK,
    responses={500: _PRICING_UNAVAILABLE},
)
async def get_subscription_price(
    company_id: str,
    plan_type: str,
    container: LedgerContainer = Depends(get_container),
):
    return await GetSubscriptionPrice(container.price_book_service).execute(company_id, plan_type.upper())


@router.get(
    "/companies/{company_id}/job-price",
    response_model=JobPriceDTO,
    status_code=status.HTTP_200_OK,
    responses={500: _PRICING_UNAVAILABLE},
)
async def get_job_price(
    company_id: str,
    service_package: str = Query(default=SELF_MANAGED),
    salary_max: Optional[Decimal] = Query(default=None, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    """
    Price of posting a job.

    Managed packages are priced by salary band; salaries above the
    executive-search threshold of the company's pricing peg use the
    executive bands. Self-managed postings are free.
    """
    use_case = GetJobPrice(container.salary_band_service, container.currency_service)
    return await use_case.execute(company_id, salary_max, service_package)
