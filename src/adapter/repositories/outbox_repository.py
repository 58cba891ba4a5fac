"""SQLAlchemy Outbox Repository Implementation"""

from datetime import datetime
from typing import List
from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.outbox_repository import OutboxRepository
from src.domain.outbox_event import OutboxEvent, OutboxStatus


class SqlAlchemyOutboxRepository(OutboxRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, event: OutboxEvent) -> OutboxEvent:
        self.session.add(event)
        await self.session.flush()
        return event

    async def claim_deliverable(
        self, limit: int, max_attempts: int, now: datetime, lease_until: datetime
    ) -> List[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(
                or_(
                    OutboxEvent.status == OutboxStatus.NEW,
                    and_(
                        OutboxEvent.status == OutboxStatus.FAILED,
                        OutboxEvent.attempts < max_attempts,
                    ),
                ),
                or_(
                    OutboxEvent.next_attempt_at.is_(None),
                    OutboxEvent.next_attempt_at <= now,
                ),
            )
            .order_by(OutboxEvent.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self.session.execute(stmt)
        events = list(result.scalars().all())

        for event in events:
            event.next_attempt_at = lease_until
            self.session.add(event)
        await self.session.flush()
        return events

    async def update(self, event: OutboxEvent) -> OutboxEvent:
        self.session.add(event)
        await self.session.flush()
        return event
