"""Virtual Account Domain Entity

Wallet balance per owner. Each (owner_type, owner_id) pair has exactly one
account, created lazily on first access and never deleted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class AccountOwnerType(str, Enum):
    """Kinds of wallet owners"""
    COMPANY = "COMPANY"
    CONSULTANT = "CONSULTANT"
    HRM8_GLOBAL = "HRM8_GLOBAL"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class VirtualAccount(BaseModel, table=True):
    """
    Virtual Account - Tracks an owner's wallet balance

    Domain Rules:
    - One account per (owner_type, owner_id)
    - Balance must be non-negative
    - Balance changes only through credit/debit postings
    - total_credits / total_debits are lifetime counters and only grow
    """

    __tablename__ = "virtual_accounts"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='virtual_account_balance_non_negative'),
        UniqueConstraint('owner_type', 'owner_id', name='uq_virtual_accounts_owner'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique account identifier (uuid)"
    )

    owner_type: AccountOwnerType = Field(
        description="Owner kind (COMPANY, CONSULTANT, HRM8_GLOBAL)"
    )

    owner_id: str = Field(
        sa_column=Column(String(64), nullable=False, index=True),
        description="Owner identifier (company id, consultant id, or 'global')"
    )

    balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Current balance (must be >= 0)"
    )

    total_credits: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Lifetime sum of credited amounts"
    )

    total_debits: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Lifetime sum of debited amounts"
    )

    status: AccountStatus = Field(
        default=AccountStatus.ACTIVE,
        description="Account status"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "6f1c2a0e-8d8e-4a53-9d1b-2d3c4e5f6a7b",
                "owner_type": "COMPANY",
                "owner_id": "company_123",
                "balance": "1000.00",
                "total_credits": "1500.00",
                "total_debits": "500.00",
                "status": "ACTIVE",
                "created_at": "2026-01-01T00:00:00Z",
                "updated_at": "2026-01-01T00:00:00Z"
            }
        }
