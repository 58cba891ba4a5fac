"""Data Transfer Objects for Wallet Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.app.services.ledger import PostingContext
from src.domain.refund_request import RefundStatus
from src.domain.transaction_metadata import TransactionMetadata
from src.domain.virtual_account import AccountOwnerType, AccountStatus
from src.domain.virtual_transaction import TransactionDirection, TransactionStatus, TransactionType


class AccountDTO(BaseModel):
    id: str
    owner_type: AccountOwnerType
    owner_id: str
    balance: Decimal
    total_credits: Decimal
    total_debits: Decimal
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionDTO(BaseModel):
    """
    Response DTO for a ledger entry

    `details` carries the parsed metadata variant (withdrawal, addon,
    reversal or opaque).
    """

    id: str
    virtual_account_id: str
    type: TransactionType
    amount: Decimal
    direction: TransactionDirection
    balance_after: Decimal
    status: TransactionStatus
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    created_by: Optional[str] = None
    pricing_peg_used: Optional[str] = None
    billing_currency_used: Optional[str] = None
    price_book_id: Optional[str] = None
    price_book_version: Optional[str] = None
    override_id: Optional[str] = None
    details: Optional[TransactionMetadata] = None
    failed_reason: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PostingCommandDTO(BaseModel):
    """
    Command DTO for a single credit or debit

    Used as input to CreditAccount and DebitAccount.
    """

    account_id: str = Field(
        ...,
        description="Virtual account to post against"
    )

    amount: Decimal = Field(
        ...,
        description="Amount to move; must be > 0"
    )

    transaction_type: TransactionType = Field(
        ...,
        description="Ledger entry type"
    )

    context: PostingContext = Field(
        default_factory=PostingContext,
        description="Reference and pricing metadata recorded on the entry"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "6f1c2a0e-8d8e-4a53-9d1b-2d3c4e5f6a7b",
                "amount": "1990.00",
                "transaction_type": "JOB_POSTING_DEDUCTION",
                "context": {
                    "reference_type": "JOB",
                    "reference_id": "job_456",
                    "pricing_peg": "USD",
                    "billing_currency": "USD",
                    "price_book_id": "book_usd_2026",
                    "price_book_version": "2026-Q1"
                }
            }
        }


class BalanceDTO(BaseModel):
    account_id: str
    owner_type: AccountOwnerType
    owner_id: str
    balance: Decimal
    total_credits: Decimal
    total_debits: Decimal
    currency: str
    status: AccountStatus


class TransactionPageDTO(BaseModel):
    transactions: List[TransactionDTO]
    total: int
    limit: int
    offset: int


class EarningsDTO(BaseModel):
    """Completed credits of an account, lifetime and over the last 30 days"""

    account_id: str
    owner_type: AccountOwnerType
    owner_id: str
    total_earned: Decimal
    last_30_days: Decimal
    available_balance: Decimal


class WithdrawalCommandDTO(BaseModel):
    """
    Command DTO for requesting a payout

    The amount is held immediately; an admin approves or rejects later.
    """

    owner_type: AccountOwnerType = Field(default=AccountOwnerType.CONSULTANT)
    owner_id: str = Field(..., description="Wallet owner asking for the payout")
    amount: Decimal = Field(..., description="Amount to withdraw; must be > 0")
    payment_method: str = Field(..., description="Payout rail, e.g. BANK_TRANSFER")
    bank_details: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "owner_type": "CONSULTANT",
                "owner_id": "consultant_42",
                "amount": "500.00",
                "payment_method": "BANK_TRANSFER",
                "bank_details": {"iban": "GB00BANK0000000000"},
                "notes": "March payout"
            }
        }


class RefundCommandDTO(BaseModel):
    """Command DTO for asking a refund of a completed charge"""

    company_id: str
    transaction_id: str
    reason: str = Field(..., min_length=1)


class RefundRequestDTO(BaseModel):
    id: str
    company_id: str
    virtual_account_id: str
    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal
    reason: str
    status: RefundStatus
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    refund_transaction_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AddonPurchaseCommandDTO(BaseModel):
    owner_type: AccountOwnerType = Field(default=AccountOwnerType.COMPANY)
    owner_id: str
    addon_name: str
    amount: Decimal
    quantity: Optional[int] = None
    description: Optional[str] = None
    created_by: Optional[str] = None


class OwnerTypeStatsDTO(BaseModel):
    count: int
    total_balance: Decimal
    total_credits: Decimal
    total_debits: Decimal


class WalletStatsDTO(BaseModel):
    total_accounts: int
    total_balance: Decimal
    by_owner_type: Dict[str, OwnerTypeStatsDTO]
    pending_withdrawals: int
    pending_withdrawal_amount: Decimal


class LedgerDiscrepancyDTO(BaseModel):
    """
    Single account whose balance disagrees with its ledger entries

    Used as part of ReconciliationResultDTO.
    """

    account_id: str = Field(
        ...,
        description="Virtual account identifier"
    )

    owner_type: AccountOwnerType = Field(
        ...,
        description="Account owner kind"
    )

    owner_id: str = Field(
        ...,
        description="Account owner identifier"
    )

    account_balance: Decimal = Field(
        ...,
        description="Balance stored on the account row"
    )

    calculated_balance: Decimal = Field(
        ...,
        description="Sum of credits minus debits over the ledger entries"
    )

    discrepancy: Decimal = Field(
        ...,
        description="account_balance - calculated_balance"
    )


class ReconciliationResultDTO(BaseModel):
    """
    Response DTO for ledger reconciliation

    Produced by ReconcileLedger; reconciliation never modifies data.
    """

    total_accounts_checked: int = Field(
        ...,
        ge=0,
        description="Number of accounts compared"
    )

    discrepancies_found: int = Field(
        ...,
        ge=0,
        description="Number of accounts whose balance did not match"
    )

    discrepancies: List[LedgerDiscrepancyDTO] = Field(
        default_factory=list,
        description="Details of every mismatching account"
    )

    reconciliation_time: datetime = Field(
        ...,
        description="When the reconciliation started"
    )

    execution_time_ms: int = Field(
        ...,
        ge=0,
        description="Execution time in milliseconds"
    )
