"""Data Transfer Objects for Commission Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.commission import CommissionStatus, CommissionType


class CommissionCommandDTO(BaseModel):
    """
    Command DTO for requesting or awarding a commission

    Amount rule: explicit amount, else the job/subscription payment times
    the rate (explicit rate, else the consultant's default, else the
    configured default).
    """

    consultant_id: str = Field(
        ...,
        description="Consultant earning the commission"
    )

    commission_type: CommissionType = Field(
        ...,
        description="Commission source (RECRUITMENT_SERVICE, SUBSCRIPTION_SALE, PLACEMENT)"
    )

    job_id: Optional[str] = Field(default=None, description="Job the commission is earned on")

    subscription_id: Optional[str] = Field(default=None, description="Subscription the commission is earned on")

    amount: Optional[Decimal] = Field(default=None, description="Explicit amount; computed when omitted")

    rate: Optional[Decimal] = Field(default=None, ge=0, le=1, description="Explicit rate override")

    currency: Optional[str] = Field(default=None, description="Defaults to the source payment currency")

    description: Optional[str] = None

    created_by: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "consultant_id": "consultant_42",
                "commission_type": "RECRUITMENT_SERVICE",
                "job_id": "job_456"
            }
        }


class CommissionDTO(BaseModel):
    id: str
    consultant_id: str
    region_id: str
    job_id: Optional[str] = None
    subscription_id: Optional[str] = None
    type: CommissionType
    amount: Decimal
    rate: Optional[Decimal] = None
    currency: str
    description: Optional[str] = None
    notes: Optional[str] = None
    status: CommissionStatus
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    disputed_at: Optional[datetime] = None
    clawed_back_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommissionPageDTO(BaseModel):
    commissions: List[CommissionDTO]
    total: int
    limit: int
    offset: int


class CommissionPaymentFailureDTO(BaseModel):
    commission_id: str
    code: str
    message: str


class ProcessPaymentsResultDTO(BaseModel):
    """
    Result of a bulk payout run

    Each commission is processed in its own transaction; failures do not
    stop the batch.
    """

    paid: List[CommissionDTO] = Field(default_factory=list)
    failed: List[CommissionPaymentFailureDTO] = Field(default_factory=list)
