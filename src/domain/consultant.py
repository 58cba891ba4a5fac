"""Consultant Domain Entity

Billing view of a recruitment consultant / sales agent: region and the
default commission rate used when awarding commissions.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class Consultant(BaseModel, table=True):

    __tablename__ = "consultants"

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    region_id: str = Field(sa_column=Column(String(36), nullable=False))

    first_name: str = Field(sa_column=Column(String(100), nullable=False))

    last_name: str = Field(sa_column=Column(String(100), nullable=False))

    email: str = Field(sa_column=Column(String(255), nullable=False))

    default_commission_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(5, 4), nullable=True),
        description="Fraction of the payment paid as commission (e.g. 0.2000)"
    )
