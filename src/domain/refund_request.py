"""Refund Request Domain Entity

A request to give back a completed wallet charge. Not a ledger entry
itself: approval posts a genuine credit to the wallet.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.virtual_transaction import TransactionType


class RefundStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RefundRequest(BaseModel, table=True):

    __tablename__ = "refund_requests"
    __table_args__ = (
        Index('ix_refund_requests_transaction', 'transaction_id'),
        Index('ix_refund_requests_status', 'status'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    company_id: str = Field(sa_column=Column(String(64), nullable=False))

    virtual_account_id: str = Field(sa_column=Column(String(36), nullable=False))

    transaction_id: str = Field(sa_column=Column(String(36), nullable=False))

    transaction_type: TransactionType = Field(description="Type of the charge being refunded")

    amount: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    reason: str = Field(sa_column=Column(Text, nullable=False))

    status: RefundStatus = Field(default=RefundStatus.PENDING)

    processed_by: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    processed_at: Optional[datetime] = Field(default=None)

    admin_notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    rejection_reason: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    refund_transaction_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
