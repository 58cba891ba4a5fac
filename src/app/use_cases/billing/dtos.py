"""Data Transfer Objects for Job and Subscription Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.job import JobPaymentStatus, JobStatus
from src.domain.subscription import BillingCycle, SubscriptionPlanType, SubscriptionStatus


class JobPaymentCommandDTO(BaseModel):
    """
    Command DTO for paying a job posting from the company wallet

    Used as input to PayForJobFromWallet.
    """

    company_id: str = Field(
        ...,
        description="Company paying for the job"
    )

    job_id: str = Field(
        ...,
        description="Job being paid"
    )

    salary_max: Optional[Decimal] = Field(
        default=None,
        description="Top of the advertised salary range; drives executive-search bands"
    )

    service_package: str = Field(
        ...,
        description="self-managed, shortlisting, full-service, executive-search or rpo"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="User triggering the payment (recorded on the ledger entry)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "company_id": "company_123",
                "job_id": "job_456",
                "salary_max": "180000",
                "service_package": "executive-search",
                "user_id": "user_789"
            }
        }


class JobPricingDTO(BaseModel):
    """Price a job was (or would have been) charged at"""

    price: Decimal
    currency: str
    product_code: str
    band: Optional[str] = None
    is_executive_search: bool = False
    pricing_peg: Optional[str] = None
    price_book_id: Optional[str] = None
    price_book_version: Optional[str] = None
    override_id: Optional[str] = None


class JobPaymentResultDTO(BaseModel):
    """
    Result of PayForJobFromWallet

    Failures are reported here rather than raised; the job and the wallet
    are untouched when success is False.
    """

    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    pricing: Optional[JobPricingDTO] = None
    transaction_id: Optional[str] = None
    was_already_charged: bool = False


class PublishJobResultDTO(BaseModel):
    job_id: str
    status: JobStatus
    payment_status: JobPaymentStatus
    payment: Optional[JobPaymentResultDTO] = None


class JobRefundCommandDTO(BaseModel):
    company_id: str
    job_id: str
    user_id: Optional[str] = None
    reason: str = Field(..., min_length=1)


class CreateSubscriptionCommandDTO(BaseModel):
    """
    Command DTO for starting a subscription

    Price and quota come from the effective price book (SUB_<plan>) and
    the plan's perks unless supplied explicitly.
    """

    company_id: str = Field(..., description="Subscribing company")

    plan_type: SubscriptionPlanType = Field(..., description="Plan tier")

    name: Optional[str] = Field(default=None, description="Display name; defaults to the plan")

    billing_cycle: BillingCycle = Field(default=BillingCycle.MONTHLY)

    base_price: Optional[Decimal] = Field(default=None, gt=0, description="Explicit price (custom deals)")

    currency: Optional[str] = Field(default=None, description="Currency of an explicit price")

    job_quota: Optional[int] = Field(default=None, ge=0, description="Explicit quota; plan default when omitted")

    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    start_date: Optional[datetime] = None

    auto_renew: bool = True

    pay_from_wallet: bool = Field(default=False, description="Debit the company wallet now")

    sales_agent_id: Optional[str] = Field(default=None, description="Consultant credited with the sale")

    created_by: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "company_id": "company_123",
                "plan_type": "SMALL",
                "billing_cycle": "MONTHLY",
                "pay_from_wallet": True
            }
        }


class SubscriptionDTO(BaseModel):
    id: str
    company_id: str
    name: str
    plan_type: SubscriptionPlanType
    status: SubscriptionStatus
    base_price: Decimal
    currency: str
    billing_cycle: BillingCycle
    discount_percent: Decimal
    start_date: datetime
    end_date: Optional[datetime] = None
    renewal_date: Optional[datetime] = None
    job_quota: Optional[int] = None
    jobs_used: int
    prepaid_balance: Decimal
    auto_renew: bool
    sales_agent_id: Optional[str] = None
    price_book_id: Optional[str] = None
    pricing_peg: Optional[str] = None
    price_book_version: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
