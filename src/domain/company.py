"""Company Domain Entity

Only the fields the billing core reads or writes: location, currency
assignment and the currency lock, pricing linkage and sales attribution.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, generate_uuid


class Company(BaseModel, table=True):
    """
    Company - Billing view of a hiring company

    Domain Rules:
    - pricing_peg / billing_currency are assigned once from the country map
    - currency_locked_at is set on the first successful payment and never
      cleared, except by an audited emergency override
    """

    __tablename__ = "companies"

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    name: str = Field(sa_column=Column(String(255), nullable=False))

    country: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    region_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    pricing_peg: Optional[str] = Field(
        default=None,
        sa_column=Column(String(3), nullable=True),
        description="Reference currency prices are indexed to"
    )

    billing_currency: Optional[str] = Field(
        default=None,
        sa_column=Column(String(3), nullable=True),
        description="Currency the company is charged in"
    )

    currency_locked_at: Optional[datetime] = Field(
        default=None,
        description="Set on first payment; currencies are immutable afterwards"
    )

    price_book_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True),
        description="Directly assigned price book"
    )

    sales_agent_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True),
        description="Consultant attributed with the account"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_currency_locked(self) -> bool:
        return self.currency_locked_at is not None
