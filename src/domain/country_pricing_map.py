"""Country Pricing Map Domain Entity

Maps an ISO country code to the pricing peg and billing currency assigned
to companies registered there. Read-only at request time.
"""

from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, generate_uuid


class CountryPricingMap(BaseModel, table=True):

    __tablename__ = "country_pricing_maps"

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    country_code: str = Field(
        sa_column=Column(String(2), nullable=False, unique=True),
        description="ISO 3166-1 alpha-2 code"
    )

    country_name: str = Field(sa_column=Column(String(100), nullable=False))

    pricing_peg: str = Field(sa_column=Column(String(3), nullable=False))

    billing_currency: str = Field(sa_column=Column(String(3), nullable=False))

    is_active: bool = Field(default=True)
