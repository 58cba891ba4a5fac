"""Job Domain Entity

Billing view of a job posting: the service package being bought and the
payment snapshot written when the job is paid from the company wallet.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid

SELF_MANAGED = "self-managed"
EXECUTIVE_SEARCH = "executive-search"

# Product priced for each paid service package
SERVICE_PACKAGE_PRODUCTS = {
    "shortlisting": "RECRUIT_SHORTLISTING",
    "full-service": "RECRUIT_FULL",
    EXECUTIVE_SEARCH: "RECRUIT_EXEC_BAND_1",
    "rpo": "RECRUIT_RPO",
}


class JobStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class JobPaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class Job(BaseModel, table=True):

    __tablename__ = "jobs"
    __table_args__ = (
        Index('ix_jobs_company', 'company_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    company_id: str = Field(sa_column=Column(String(36), nullable=False))

    title: str = Field(sa_column=Column(String(255), nullable=False))

    status: JobStatus = Field(default=JobStatus.DRAFT)

    service_package: str = Field(
        default=SELF_MANAGED,
        sa_column=Column(String(50), nullable=False),
        description="self-managed, shortlisting, full-service, executive-search or rpo"
    )

    salary_max: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(18, 2), nullable=True))

    payment_status: JobPaymentStatus = Field(default=JobPaymentStatus.PENDING)

    payment_amount: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(18, 2), nullable=True))

    payment_currency: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    payment_completed_at: Optional[datetime] = Field(default=None)

    payment_failed_at: Optional[datetime] = Field(default=None)

    price_book_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    pricing_peg: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    price_book_version: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == JobPaymentStatus.PAID
