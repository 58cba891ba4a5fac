"""Subscription Domain Entity

Tracks company subscription plans, their regional price snapshot and the
job-posting quota they grant.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from dateutil.relativedelta import relativedelta
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class SubscriptionPlanType(str, Enum):
    PAYG = "PAYG"
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
    ENTERPRISE = "ENTERPRISE"
    RPO = "RPO"
    CUSTOM = "CUSTOM"


class BillingCycle(str, Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


# Job quota granted per plan (None = unlimited)
PLAN_JOB_QUOTAS = {
    SubscriptionPlanType.PAYG: 0,
    SubscriptionPlanType.SMALL: 5,
    SubscriptionPlanType.MEDIUM: 25,
    SubscriptionPlanType.LARGE: 50,
    SubscriptionPlanType.ENTERPRISE: None,
    SubscriptionPlanType.RPO: None,
}


def cycle_end(start: datetime, billing_cycle: BillingCycle) -> datetime:
    """End of one billing cycle starting at `start`; Jan 31 + 1 month is Feb 28/29"""
    if billing_cycle == BillingCycle.MONTHLY:
        return start + relativedelta(months=1)
    return start + relativedelta(years=1)


class Subscription(BaseModel, table=True):
    """
    Subscription - Company plan with regional pricing snapshot

    Domain Rules:
    - jobs_used only grows and never exceeds job_quota when job_quota is set
    - end_date/renewal_date are one billing cycle after start
    - Status transitions: ACTIVE -> CANCELLED
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index('ix_subscriptions_company_id', 'company_id'),
        Index('ix_subscriptions_status', 'status'),
        CheckConstraint('job_quota IS NULL OR jobs_used <= job_quota', name='jobs_used_within_quota'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique subscription identifier (uuid)"
    )

    company_id: str = Field(
        sa_column=Column(String(36), nullable=False),
        description="Subscribed company"
    )

    name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Name of the subscription plan"
    )

    plan_type: SubscriptionPlanType = Field(description="Plan tier")

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status (ACTIVE, CANCELLED)"
    )

    base_price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Price per billing cycle"
    )

    currency: str = Field(default="USD", sa_column=Column(String(3), nullable=False))

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    discount_percent: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(5, 2), nullable=False, default=0)
    )

    start_date: datetime = Field(default_factory=datetime.utcnow)

    end_date: Optional[datetime] = Field(default=None)

    renewal_date: Optional[datetime] = Field(default=None)

    job_quota: Optional[int] = Field(default=None, description="None = unlimited")

    jobs_used: int = Field(default=0)

    prepaid_balance: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(18, 2), nullable=False, default=0)
    )

    auto_renew: bool = Field(default=True)

    sales_agent_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    price_book_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    pricing_peg: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    price_book_version: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Subscription creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @property
    def has_quota_left(self) -> bool:
        return self.job_quota is None or self.jobs_used < self.job_quota

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "3c2b1a09-8f7e-4d6c-5b4a-392817161514",
                "company_id": "company_123",
                "name": "Small Plan",
                "plan_type": "SMALL",
                "status": "ACTIVE",
                "base_price": "295.00",
                "currency": "USD",
                "billing_cycle": "MONTHLY",
                "start_date": "2026-01-01T00:00:00Z",
                "end_date": "2026-02-01T00:00:00Z",
                "renewal_date": "2026-02-01T00:00:00Z",
                "job_quota": 5,
                "jobs_used": 0,
                "prepaid_balance": "295.00"
            }
        }
