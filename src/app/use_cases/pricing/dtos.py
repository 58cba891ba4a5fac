"""Data Transfer Objects for Pricing Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from src.app.services.price_book_selection import ResolutionSource


class EmergencyOverrideCommandDTO(BaseModel):
    """
    Command DTO for rewriting a locked company's currencies

    Admin only. Always audited.
    """

    company_id: str
    pricing_peg: str = Field(..., min_length=3, max_length=3)
    billing_currency: str = Field(..., min_length=3, max_length=3)
    admin_id: str
    reason: str = Field(..., min_length=1, description="Why the lock is being bypassed")

    @field_validator("pricing_peg", "billing_currency")
    @classmethod
    def upper_case(cls, value: str) -> str:
        return value.upper()


class EnterpriseOverrideDTO(BaseModel):
    id: str
    company_id: str
    price_book_id: Optional[str] = None
    pricing_peg: Optional[str] = None
    billing_currency: Optional[str] = None
    effective_from: datetime
    effective_to: Optional[datetime] = None
    is_active: bool
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PriceBookDTO(BaseModel):
    id: str
    name: str
    company_id: Optional[str] = None
    is_global: bool
    pricing_peg: Optional[str] = None
    billing_currency: Optional[str] = None
    currency: str
    version: Optional[str] = None
    effective_from: datetime
    effective_to: Optional[datetime] = None
    is_active: bool
    is_approved: bool

    class Config:
        from_attributes = True


class EffectivePriceBookDTO(BaseModel):
    price_book: PriceBookDTO
    source: ResolutionSource
    override_id: Optional[str] = None


class PriceQuoteDTO(BaseModel):
    """Unit price of one product for a company"""

    price: Decimal
    currency: str
    product_code: str
    tier_id: str
    tier_name: str
    band_name: Optional[str] = None
    price_book_id: str
    price_book_name: str
    price_book_version: Optional[str] = None
    source: ResolutionSource
    override_id: Optional[str] = None


class JobPriceDTO(BaseModel):
    """
    Price of a job posting

    Self-managed postings are free: price 0 and no product.
    """

    price: Decimal
    currency: str
    service_package: str
    product_code: Optional[str] = None
    band: Optional[str] = None
    is_executive_search: bool = False
    price_book_id: Optional[str] = None
    price_book_version: Optional[str] = None
    override_id: Optional[str] = None
