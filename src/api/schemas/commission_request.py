"""Request schemas for Commission API"""

from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from src.domain.commission import CommissionType, DisputeResolution


class CommissionRequestSchema(BaseModel):
    """
    Request schema for creating a commission

    Used for POST /commissions and POST /commissions/award endpoints.
    """

    consultant_id: str = Field(..., min_length=1)
    commission_type: CommissionType
    job_id: Optional[str] = None
    subscription_id: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, description="Explicit amount; computed when omitted")
    rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    description: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v):
        return v.upper() if v else v

    @model_validator(mode="after")
    def require_source_or_amount(self):
        if self.amount is None and not (self.job_id or self.subscription_id):
            raise ValueError("Either amount or a job_id/subscription_id to compute it from is required")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "consultant_id": "consultant_42",
                "commission_type": "RECRUITMENT_SERVICE",
                "job_id": "job_456",
                "created_by": "admin_1",
            }
        }


class CommissionActionSchema(BaseModel):
    """Body of confirm and clawback actions"""

    reason: Optional[str] = None
    created_by: Optional[str] = None


class DisputeRequestSchema(BaseModel):
    reason: str = Field(..., min_length=1)


class ResolveDisputeRequestSchema(BaseModel):
    resolution: DisputeResolution
    notes: Optional[str] = None
    created_by: Optional[str] = None


class ProcessPaymentsRequestSchema(BaseModel):
    commission_ids: List[str] = Field(..., min_length=1)
