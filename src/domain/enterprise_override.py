"""Enterprise Override Domain Entity

Company-scoped, time-bounded pricing override. While active it pins a
price book and/or a currency pair and beats every other resolution step.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import String, Text
from src.domain.base import BaseModel, generate_uuid


class EnterpriseOverride(BaseModel, table=True):

    __tablename__ = "enterprise_overrides"
    __table_args__ = (
        Index('ix_enterprise_overrides_company_active', 'company_id', 'is_active'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    company_id: str = Field(sa_column=Column(String(36), nullable=False))

    price_book_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    pricing_peg: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    billing_currency: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    effective_from: datetime = Field(default_factory=datetime.utcnow)

    effective_to: Optional[datetime] = Field(default=None)

    is_active: bool = Field(default=True)

    created_by: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    approved_by: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    def is_effective_at(self, moment: datetime) -> bool:
        if not self.is_active or self.effective_from > moment:
            return False
        return self.effective_to is None or self.effective_to >= moment

    @property
    def pins_currency_pair(self) -> bool:
        return bool(self.pricing_peg and self.billing_currency)
