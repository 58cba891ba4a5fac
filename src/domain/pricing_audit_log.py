"""Pricing Audit Log Domain Entity

Append-only record of every sanctioned change to a company's currency
assignment (initial assignment and emergency overrides).
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import String, Text
from src.domain.base import BaseModel, generate_uuid


class PricingAuditAction(str, Enum):
    CURRENCY_ASSIGNED = "CURRENCY_ASSIGNED"
    EMERGENCY_OVERRIDE = "EMERGENCY_OVERRIDE"


class PricingAuditLog(BaseModel, table=True):

    __tablename__ = "pricing_audit_logs"
    __table_args__ = (
        Index('ix_pricing_audit_logs_company', 'company_id', 'created_at'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    company_id: str = Field(sa_column=Column(String(36), nullable=False))

    action: PricingAuditAction = Field(description="What changed")

    old_pricing_peg: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    old_billing_currency: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    new_pricing_peg: str = Field(sa_column=Column(String(3), nullable=False))

    new_billing_currency: str = Field(sa_column=Column(String(3), nullable=False))

    was_locked_at: Optional[datetime] = Field(default=None, description="Lock timestamp that was cleared")

    actor_id: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    override_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
