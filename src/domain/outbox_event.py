"""Outbox Event Domain Entity

Domain events written in the same transaction as the state change they
describe and delivered after commit by the outbox dispatcher.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import String, Text
from src.domain.base import BaseModel, generate_uuid


class OutboxStatus(str, Enum):
    NEW = "NEW"
    SENT = "SENT"
    FAILED = "FAILED"


class EventType(str, Enum):
    CURRENCY_LOCKED = "CURRENCY_LOCKED"
    CURRENCY_OVERRIDDEN = "CURRENCY_OVERRIDDEN"
    JOB_PAYMENT_COMPLETED = "JOB_PAYMENT_COMPLETED"
    JOB_PAYMENT_REFUNDED = "JOB_PAYMENT_REFUNDED"
    SUBSCRIPTION_CREATED = "SUBSCRIPTION_CREATED"
    SUBSCRIPTION_RENEWED = "SUBSCRIPTION_RENEWED"
    SUBSCRIPTION_CANCELLED = "SUBSCRIPTION_CANCELLED"
    COMMISSION_CREATED = "COMMISSION_CREATED"
    COMMISSION_CONFIRMED = "COMMISSION_CONFIRMED"
    COMMISSION_PAID = "COMMISSION_PAID"
    COMMISSION_DISPUTED = "COMMISSION_DISPUTED"
    COMMISSION_CLAWED_BACK = "COMMISSION_CLAWED_BACK"
    COMMISSION_CANCELLED = "COMMISSION_CANCELLED"
    WITHDRAWAL_REQUESTED = "WITHDRAWAL_REQUESTED"
    WITHDRAWAL_APPROVED = "WITHDRAWAL_APPROVED"
    WITHDRAWAL_REJECTED = "WITHDRAWAL_REJECTED"
    REFUND_REQUESTED = "REFUND_REQUESTED"
    REFUND_APPROVED = "REFUND_APPROVED"
    REFUND_REJECTED = "REFUND_REJECTED"


class OutboxEvent(BaseModel, table=True):
    """
    Outbox Event - Pending notification about a committed change

    Domain Rules:
    - Inserted inside the business transaction; rolled back with it
    - Delivery failures only touch the event row, never the ledger
    - next_attempt_at hides a claimed or failed event from other dispatchers
      until its lease or backoff runs out
    """

    __tablename__ = "outbox_events"
    __table_args__ = (
        Index('ix_outbox_events_status_created', 'status', 'created_at'),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    event_type: EventType = Field(description="Domain event name")

    aggregate_type: str = Field(sa_column=Column(String(50), nullable=False))

    aggregate_id: str = Field(sa_column=Column(String(64), nullable=False))

    payload: str = Field(sa_column=Column(Text, nullable=False), description="JSON payload")

    status: OutboxStatus = Field(default=OutboxStatus.NEW)

    attempts: int = Field(default=0)

    last_error: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    next_attempt_at: Optional[datetime] = Field(default=None, description="Claim lease or retry backoff")

    sent_at: Optional[datetime] = Field(default=None)

    @classmethod
    def build(
        cls, event_type: EventType, aggregate_type: str, aggregate_id: str, payload: Dict[str, Any]
    ) -> "OutboxEvent":
        return cls(
            event_type=event_type,
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            payload=json.dumps(payload, default=str),
        )

    @property
    def data(self) -> Dict[str, Any]:
        return json.loads(self.payload)
