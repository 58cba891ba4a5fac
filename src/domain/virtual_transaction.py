"""Virtual Transaction Domain Entity

Immutable append-only ledger entry for every wallet balance movement.
Each entry snapshots the balance after it was applied and the pricing
context (peg, billing currency, price book) the amount was computed with.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.transaction_metadata import TransactionMetadata, dump_metadata, load_metadata


class TransactionType(str, Enum):
    """Ledger entry types"""
    JOB_POSTING_DEDUCTION = "JOB_POSTING_DEDUCTION"
    JOB_REFUND = "JOB_REFUND"
    SUBSCRIPTION_PURCHASE = "SUBSCRIPTION_PURCHASE"
    SUBSCRIPTION_REFUND = "SUBSCRIPTION_REFUND"
    ADDON_SERVICE_CHARGE = "ADDON_SERVICE_CHARGE"
    ADDON_SERVICE_REFUND = "ADDON_SERVICE_REFUND"
    COMMISSION_EARNED = "COMMISSION_EARNED"
    COMMISSION_WITHDRAWAL = "COMMISSION_WITHDRAWAL"
    COMMISSION_CLAWBACK = "COMMISSION_CLAWBACK"
    WALLET_TOPUP = "WALLET_TOPUP"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"


class TransactionDirection(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Debit types that can be refunded, mapped to the refund credit type
REFUND_TYPE_FOR = {
    TransactionType.JOB_POSTING_DEDUCTION: TransactionType.JOB_REFUND,
    TransactionType.SUBSCRIPTION_PURCHASE: TransactionType.SUBSCRIPTION_REFUND,
    TransactionType.ADDON_SERVICE_CHARGE: TransactionType.ADDON_SERVICE_REFUND,
}


class VirtualTransaction(BaseModel, table=True):
    """
    Virtual Transaction - Immutable audit trail of balance movements

    Domain Rules:
    - Entries are append-only; amount is always positive, direction gives the sign
    - Only withdrawal entries change status after creation (PENDING -> COMPLETED/FAILED)
    - reference_type/reference_id link the entry to a job, subscription, commission, ...
    """

    __tablename__ = "virtual_transactions"
    __table_args__ = (
        Index('ix_virtual_transactions_created_at', 'created_at'),
        Index('ix_virtual_transactions_reference', 'reference_type', 'reference_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique transaction identifier (uuid)"
    )

    virtual_account_id: str = Field(
        sa_column=Column(
            String(36), ForeignKey("virtual_accounts.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        description="Foreign key to VirtualAccount"
    )

    type: TransactionType = Field(
        description="Ledger entry type"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Positive amount moved"
    )

    direction: TransactionDirection = Field(
        description="CREDIT adds to the balance, DEBIT subtracts"
    )

    balance_after: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Account balance right after this entry"
    )

    status: TransactionStatus = Field(
        default=TransactionStatus.COMPLETED,
        description="Entry status"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
    )

    reference_type: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Type of referenced entity (JOB, SUBSCRIPTION, COMMISSION, ...)"
    )

    reference_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="ID of referenced entity"
    )

    created_by: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    pricing_peg_used: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    billing_currency_used: Optional[str] = Field(default=None, sa_column=Column(String(3), nullable=True))

    price_book_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    price_book_version: Optional[str] = Field(default=None, sa_column=Column(String(50), nullable=True))

    override_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    metadata_json: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Tagged metadata variant serialized as JSON"
    )

    failed_reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    processed_at: Optional[datetime] = Field(
        default=None,
        description="When a PENDING entry was completed or failed"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Transaction timestamp (immutable)"
    )

    @property
    def details(self) -> Optional[TransactionMetadata]:
        return load_metadata(self.metadata_json)

    def attach_details(self, details: Optional[TransactionMetadata]) -> None:
        self.metadata_json = dump_metadata(details)

    @property
    def signed_amount(self) -> Decimal:
        if self.direction == TransactionDirection.CREDIT:
            return self.amount
        return -self.amount

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d",
                "virtual_account_id": "6f1c2a0e-8d8e-4a53-9d1b-2d3c4e5f6a7b",
                "type": "JOB_POSTING_DEDUCTION",
                "amount": "1990.00",
                "direction": "DEBIT",
                "balance_after": "3010.00",
                "status": "COMPLETED",
                "reference_type": "JOB",
                "reference_id": "job_456",
                "pricing_peg_used": "USD",
                "billing_currency_used": "USD",
                "price_book_id": "book_usd_2026",
                "price_book_version": "2026-Q1",
                "created_at": "2026-01-01T00:00:00Z"
            }
        }
