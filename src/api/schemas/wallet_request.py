"""Request schemas for Wallet API

Pydantic models for validating incoming HTTP requests.
"""

from decimal import Decimal
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionDirection


def _positive(v: Decimal) -> Decimal:
    if v <= 0:
        raise ValueError("Amount must be greater than 0")
    if v.as_tuple().exponent < -2:
        raise ValueError("Amount cannot have more than 2 decimal places")
    return v


class TopUpRequestSchema(BaseModel):
    """
    Request schema for adding funds to a wallet

    Used for POST /wallet/accounts/{owner_type}/{owner_id}/topup endpoint.
    """

    amount: Decimal = Field(..., gt=0, description="Amount to add (must be > 0)")
    currency: Optional[str] = Field(
        default=None,
        min_length=3,
        max_length=3,
        description="Payment currency; company top-ups are checked against the currency lock",
    )
    payment_reference: Optional[str] = Field(
        default=None,
        description="External payment id (card charge, bank transfer)",
    )
    created_by: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _positive(v)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "5000.00",
                "currency": "USD",
                "payment_reference": "pi_3NxYz",
                "created_by": "user_17",
            }
        }


class AdjustmentRequestSchema(BaseModel):
    """
    Request schema for a manual balance correction

    Used for POST /wallet/accounts/{owner_type}/{owner_id}/adjustments endpoint.
    """

    amount: Decimal = Field(..., gt=0, description="Adjustment amount (must be > 0)")
    direction: TransactionDirection = Field(..., description="CREDIT adds funds, DEBIT removes them")
    reason: str = Field(..., min_length=1, description="Why the balance is corrected")
    admin_id: str = Field(..., min_length=1)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _positive(v)


class WithdrawalRequestSchema(BaseModel):
    """
    Request schema for a payout

    Used for POST /wallet/withdrawals endpoint.
    """

    owner_type: AccountOwnerType = Field(default=AccountOwnerType.CONSULTANT)
    owner_id: str = Field(..., min_length=1, description="Wallet owner asking for the payout")
    amount: Decimal = Field(..., gt=0, description="Amount to withdraw (must be > 0)")
    payment_method: str = Field(..., min_length=1, description="Payout rail, e.g. BANK_TRANSFER")
    bank_details: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _positive(v)

    class Config:
        json_schema_extra = {
            "example": {
                "owner_type": "CONSULTANT",
                "owner_id": "consultant_42",
                "amount": "500.00",
                "payment_method": "BANK_TRANSFER",
                "bank_details": {"iban": "GB00BANK0000000000"},
            }
        }


class DecisionRequestSchema(BaseModel):
    """Admin approval or rejection of a withdrawal or refund request"""

    admin_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(default=None, description="Required when rejecting")
    notes: Optional[str] = None


class RefundRequestSchema(BaseModel):
    """
    Request schema for asking a refund of a charge

    Used for POST /wallet/refunds endpoint.
    """

    company_id: str = Field(..., min_length=1)
    transaction_id: str = Field(..., min_length=1, description="The completed charge to refund")
    reason: str = Field(..., min_length=1)


class AddonPurchaseRequestSchema(BaseModel):
    """
    Request schema for buying an add-on service from the wallet

    Used for POST /wallet/addons endpoint.
    """

    owner_type: AccountOwnerType = Field(default=AccountOwnerType.COMPANY)
    owner_id: str = Field(..., min_length=1)
    addon_name: str = Field(..., min_length=1, description="e.g. FEATURED_LISTING")
    amount: Decimal = Field(..., gt=0)
    quantity: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return _positive(v)
