"""Outbox Repository Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
from src.domain.outbox_event import OutboxEvent


class OutboxRepository(ABC):

    @abstractmethod
    async def add(self, event: OutboxEvent) -> OutboxEvent:
        """
        Insert an event in the current transaction

        The event becomes visible to the dispatcher only if that
        transaction commits.
        """
        pass

    @abstractmethod
    async def claim_deliverable(
        self, limit: int, max_attempts: int, now: datetime, lease_until: datetime
    ) -> List[OutboxEvent]:
        """
        Claim a batch of due events, oldest first

        Due means NEW or FAILED below max_attempts, with next_attempt_at unset
        or not after `now`. Claimed events get next_attempt_at = lease_until,
        so no other dispatcher picks them up while they are being delivered.
        Rows locked by a concurrent claim are skipped.
        """
        pass

    @abstractmethod
    async def update(self, event: OutboxEvent) -> OutboxEvent:
        pass
