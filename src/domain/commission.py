"""Commission Domain Entity

Commission owed to a consultant for a job payment or subscription sale,
with the lifecycle state machine that drives its ledger effects.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.errors import InvalidStateTransitionError


class CommissionType(str, Enum):
    RECRUITMENT_SERVICE = "RECRUITMENT_SERVICE"
    SUBSCRIPTION_SALE = "SUBSCRIPTION_SALE"
    PLACEMENT = "PLACEMENT"


class CommissionStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    DISPUTED = "DISPUTED"
    CLAWBACK = "CLAWBACK"
    CANCELLED = "CANCELLED"


class DisputeResolution(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"


ALLOWED_TRANSITIONS = {
    CommissionStatus.PENDING: {CommissionStatus.CONFIRMED, CommissionStatus.CANCELLED},
    CommissionStatus.CONFIRMED: {CommissionStatus.PAID, CommissionStatus.DISPUTED, CommissionStatus.CLAWBACK},
    CommissionStatus.PAID: {CommissionStatus.DISPUTED, CommissionStatus.CLAWBACK},
    CommissionStatus.DISPUTED: {CommissionStatus.CONFIRMED, CommissionStatus.CLAWBACK},
    CommissionStatus.CLAWBACK: set(),
    CommissionStatus.CANCELLED: set(),
}

# States in which the consultant's wallet holds the credited amount
CREDITED_STATES = {CommissionStatus.CONFIRMED, CommissionStatus.PAID, CommissionStatus.DISPUTED}

_TIMESTAMP_FIELD = {
    CommissionStatus.CONFIRMED: "confirmed_at",
    CommissionStatus.PAID: "paid_at",
    CommissionStatus.DISPUTED: "disputed_at",
    CommissionStatus.CLAWBACK: "clawed_back_at",
    CommissionStatus.CANCELLED: "cancelled_at",
}


class Commission(BaseModel, table=True):
    """
    Commission - Consultant earning tied to the wallet ledger

    Domain Rules:
    - amount is frozen when the commission is created
    - PENDING has no ledger effect; CONFIRMED credits the consultant wallet
    - PAID is a payout marker only
    - CLAWBACK debits the credited amount back; PENDING is cancelled instead
    """

    __tablename__ = "commissions"
    __table_args__ = (
        Index('ix_commissions_consultant_status', 'consultant_id', 'status'),
        Index('ix_commissions_region', 'region_id'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    consultant_id: str = Field(sa_column=Column(String(36), nullable=False))

    region_id: str = Field(sa_column=Column(String(36), nullable=False))

    job_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    subscription_id: Optional[str] = Field(default=None, sa_column=Column(String(36), nullable=True))

    type: CommissionType = Field(description="Commission source")

    amount: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    rate: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(5, 4), nullable=True))

    currency: str = Field(default="USD", sa_column=Column(String(3), nullable=False))

    description: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    status: CommissionStatus = Field(default=CommissionStatus.PENDING)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    confirmed_at: Optional[datetime] = Field(default=None)

    paid_at: Optional[datetime] = Field(default=None)

    disputed_at: Optional[datetime] = Field(default=None)

    clawed_back_at: Optional[datetime] = Field(default=None)

    cancelled_at: Optional[datetime] = Field(default=None)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def holds_credited_funds(self) -> bool:
        return self.status in CREDITED_STATES

    def can_transition_to(self, target: CommissionStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, target: CommissionStatus, action: str, at: Optional[datetime] = None) -> None:
        if not self.can_transition_to(target):
            raise InvalidStateTransitionError("commission", self.status.value, action)
        at = at or datetime.utcnow()
        self.status = target
        setattr(self, _TIMESTAMP_FIELD[target], at)
        self.updated_at = at

    def append_note(self, note: Optional[str]) -> None:
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note
