"""Request schemas for Pricing API"""

from pydantic import BaseModel, Field, field_validator


class AssignCurrencyRequestSchema(BaseModel):
    """
    Request schema for assigning a company's currencies from its country

    Used for POST /pricing/companies/{company_id}/currency endpoint.
    """

    country: str = Field(..., min_length=2, description="ISO country code or country name")
    actor_id: str = Field(default=None, description="User performing the assignment")

    @field_validator('country')
    @classmethod
    def strip_country(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Country cannot be blank")
        return v

    class Config:
        json_schema_extra = {"example": {"country": "AU", "actor_id": "user_17"}}


class EmergencyOverrideRequestSchema(BaseModel):
    """
    Request schema for rewriting a locked company's currencies

    Used for POST /pricing/companies/{company_id}/currency/override endpoint.
    """

    pricing_peg: str = Field(..., min_length=3, max_length=3)
    billing_currency: str = Field(..., min_length=3, max_length=3)
    admin_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, description="Why the lock is being bypassed")

    class Config:
        json_schema_extra = {
            "example": {
                "pricing_peg": "GBP",
                "billing_currency": "GBP",
                "admin_id": "admin_1",
                "reason": "Company relocated to the UK",
            }
        }
