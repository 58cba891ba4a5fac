"""Price Book, Product and Price Tier Domain Entities

A price book is a versioned, time-bounded collection of tiers for one
currency pair (regional/global) or for one company. A tier prices one
product either by quantity range or by salary band.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, generate_uuid

EXECUTIVE_SEARCH_PREFIX = "RECRUIT_EXEC_"
EXECUTIVE_BAND_PREFIX = "RECRUIT_EXEC_BAND_"


class ProductCategory(str, Enum):
    SUBSCRIPTION = "SUBSCRIPTION"
    JOB_POSTING = "JOB_POSTING"
    ADDON = "ADDON"


class PriceBook(BaseModel, table=True):
    """
    Price Book - Versioned price list

    Domain Rules:
    - Usable only when active, approved and inside its validity window
    - company_id set => company-scoped; is_global => last-resort fallback
    """

    __tablename__ = "price_books"
    __table_args__ = (
        Index('ix_price_books_currency_pair', 'pricing_peg', 'billing_currency'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    name: str = Field(sa_column=Column(String(255), nullable=False))

    company_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    is_global: bool = Field(default=False)

    pricing_peg: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    billing_currency: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False),
        description="Legacy display currency, used when billing_currency is unset"
    )

    version: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))

    effective_from: datetime = Field(default_factory=datetime.utcnow)

    effective_to: Optional[datetime] = Field(default=None)

    is_active: bool = Field(default=True)

    is_approved: bool = Field(default=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def charge_currency(self) -> str:
        return self.billing_currency or self.currency

    def is_effective_at(self, moment: datetime) -> bool:
        if self.effective_from > moment:
            return False
        return self.effective_to is None or self.effective_to >= moment


class Product(BaseModel, table=True):

    __tablename__ = "products"

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    code: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        description="Product code, e.g. RECRUIT_SHORTLISTING or SUB_SMALL"
    )

    name: str = Field(sa_column=Column(String(255), nullable=False))

    category: ProductCategory = Field(description="Product family")

    is_active: bool = Field(default=True)

    @property
    def is_executive_search(self) -> bool:
        return self.code.startswith(EXECUTIVE_SEARCH_PREFIX)


class PriceTier(BaseModel, table=True):
    """
    Price Tier - Unit price for a product within a price book

    Matches either a quantity range [min_quantity, max_quantity] or a salary
    band [salary_band_min, salary_band_max]; a null upper bound is open-ended.
    """

    __tablename__ = "price_tiers"
    __table_args__ = (
        Index('ix_price_tiers_book_product', 'price_book_id', 'product_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    price_book_id: str = Field(
        sa_column=Column(String(36), ForeignKey("price_books.id", ondelete="CASCADE"), nullable=False)
    )

    product_id: str = Field(
        sa_column=Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    )

    name: str = Field(sa_column=Column(String(255), nullable=False))

    band_name: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    min_quantity: int = Field(default=1)

    max_quantity: Optional[int] = Field(default=None)

    salary_band_min: Optional[Decimal] = Field(
        default=None, sa_column=Column(Numeric(18, 2), nullable=True)
    )

    salary_band_max: Optional[Decimal] = Field(
        default=None, sa_column=Column(Numeric(18, 2), nullable=True)
    )

    unit_price: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    def matches_quantity(self, quantity: int) -> bool:
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity

    def matches_salary(self, salary: Decimal) -> bool:
        if self.salary_band_min is None or salary < self.salary_band_min:
            return False
        return self.salary_band_max is None or salary <= self.salary_band_max
