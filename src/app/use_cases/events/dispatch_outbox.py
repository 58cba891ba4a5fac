"""DispatchOutboxEvents Use Case

Delivers committed domain events to the notification service.
"""

import logging
from datetime import datetime, timedelta
from typing import List
from pydantic import BaseModel, Field
from src.app.repositories.outbox_repository import OutboxRepository
from src.app.services.notification_service import NotificationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.outbox_event import OutboxEvent, OutboxStatus

logger = logging.getLogger(__name__)


class DispatchResultDTO(BaseModel):
    delivered: int = 0
    failed: int = 0
    failed_event_ids: List[str] = Field(default_factory=list)


class DispatchOutboxEvents:
    """
    Use Case: Deliver pending outbox events

    Business Rules:
    1. Only committed events are visible, oldest first
    2. A batch is claimed for claim_seconds before delivery, so concurrent
       dispatchers never deliver the same event
    3. A delivered event becomes SENT with sent_at
    4. A failed delivery increments attempts and records last_error; the
       event stays FAILED and is retried after retry_base_seconds, doubled
       per attempt, until max_attempts is reached
    5. Delivery never touches ledger rows

    Flow:
    1. Claim a batch of due events (short transaction)
    2. Deliver each event outside any transaction
    3. Record outcomes
    """

    def __init__(
        self,
        uow: UnitOfWork,
        outbox_repo: OutboxRepository,
        notification_service: NotificationService,
        batch_size: int = 100,
        max_attempts: int = 5,
        claim_seconds: int = 60,
        retry_base_seconds: int = 30,
    ):
        self.uow = uow
        self.outbox_repo = outbox_repo
        self.notification_service = notification_service
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.claim_seconds = claim_seconds
        self.retry_base_seconds = retry_base_seconds

    async def execute(self) -> DispatchResultDTO:
        # Step 1: Claim
        async def claim():
            now = datetime.utcnow()
            return await self.outbox_repo.claim_deliverable(
                self.batch_size, self.max_attempts, now, now + timedelta(seconds=self.claim_seconds)
            )

        events = await self.uow.run(claim)
        result = DispatchResultDTO()
        if not events:
            return result

        # Step 2: Deliver
        outcomes = []
        for event in events:
            try:
                delivered = await self.notification_service.send_event(event)
                error = None if delivered else "Notification service reported failure"
            except Exception as e:
                logger.error(f"Delivery of event {event.id} raised: {e}")
                delivered = False
                error = str(e)
            outcomes.append((event, delivered, error))

        # Step 3: Record
        async def record():
            for event, delivered, error in outcomes:
                self._apply_outcome(event, delivered, error)
                await self.outbox_repo.update(event)

        await self.uow.run(record)

        for event, delivered, _ in outcomes:
            if delivered:
                result.delivered += 1
            else:
                result.failed += 1
                result.failed_event_ids.append(event.id)

        logger.info(f"Outbox dispatch: {result.delivered} delivered, {result.failed} failed")
        return result

    def retry_delay(self, attempts: int) -> timedelta:
        return timedelta(seconds=self.retry_base_seconds * 2 ** (attempts - 1))

    def _apply_outcome(self, event: OutboxEvent, delivered: bool, error) -> None:
        event.attempts += 1
        if delivered:
            event.status = OutboxStatus.SENT
            event.sent_at = datetime.utcnow()
            event.last_error = None
            event.next_attempt_at = None
            return

        event.status = OutboxStatus.FAILED
        event.last_error = error
        event.next_attempt_at = datetime.utcnow() + self.retry_delay(event.attempts)
        if event.attempts >= self.max_attempts:
            logger.error(
                f"Event {event.id} ({event.event_type.value}) gave up after {event.attempts} attempts: {error}"
            )
