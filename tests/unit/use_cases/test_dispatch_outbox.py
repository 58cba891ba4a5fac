"""Unit tests for DispatchOutboxEvents use case"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.events import DispatchOutboxEvents
from src.domain.outbox_event import EventType, OutboxEvent, OutboxStatus


def make_event(event_id, attempts=0):
    event = OutboxEvent.build(EventType.WITHDRAWAL_REQUESTED, "WITHDRAWAL", f"tx_{event_id}", {"amount": "300.00"})
    event.id = event_id
    event.attempts = attempts
    return event


@pytest.fixture
def notification_service():
    service = MagicMock()
    service.send_event = AsyncMock(return_value=True)
    return service


@pytest.fixture
def dispatch(mock_uow, mock_outbox_repo, notification_service):
    return DispatchOutboxEvents(
        uow=mock_uow,
        outbox_repo=mock_outbox_repo,
        notification_service=notification_service,
        batch_size=10,
        max_attempts=3,
        claim_seconds=60,
        retry_base_seconds=30,
    )


@pytest.mark.asyncio
class TestDispatchOutboxEvents:

    async def test_nothing_to_deliver(self, dispatch, mock_outbox_repo, notification_service):
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=[])

        result = await dispatch.execute()

        assert result.delivered == 0
        assert result.failed == 0
        notification_service.send_event.assert_not_awaited()

    async def test_batch_is_claimed_for_the_lease(self, dispatch, mock_outbox_repo):
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=[])

        await dispatch.execute()

        limit, max_attempts, now, lease_until = mock_outbox_repo.claim_deliverable.await_args.args
        assert (limit, max_attempts) == (10, 3)
        assert lease_until - now == timedelta(seconds=60)

    async def test_delivered_events_are_marked_sent(self, dispatch, mock_outbox_repo):
        events = [make_event("evt_1"), make_event("evt_2")]
        for event in events:
            event.next_attempt_at = datetime.utcnow() + timedelta(seconds=60)
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=events)

        result = await dispatch.execute()

        assert result.delivered == 2
        for event in events:
            assert event.status == OutboxStatus.SENT
            assert event.sent_at is not None
            assert event.attempts == 1
            assert event.next_attempt_at is None
        assert mock_outbox_repo.update.await_count == 2

    async def test_failures_are_recorded_and_batch_continues(
        self, dispatch, mock_outbox_repo, notification_service
    ):
        events = [make_event("evt_ok"), make_event("evt_false"), make_event("evt_raise")]
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=events)

        async def send_event(event):
            if event.id == "evt_raise":
                raise ConnectionError("webhook unreachable")
            return event.id == "evt_ok"

        notification_service.send_event = AsyncMock(side_effect=send_event)

        result = await dispatch.execute()

        assert result.delivered == 1
        assert result.failed == 2
        assert result.failed_event_ids == ["evt_false", "evt_raise"]
        assert events[1].status == OutboxStatus.FAILED
        assert events[1].last_error == "Notification service reported failure"
        assert events[2].last_error == "webhook unreachable"

    async def test_failed_event_backs_off_exponentially(self, dispatch, mock_outbox_repo, notification_service):
        """
        Given: An event that already failed once
        When: Its second delivery fails too
        Then: It is not due again for 60 seconds (30s base, doubled)
        """
        event = make_event("evt_retry", attempts=1)
        event.status = OutboxStatus.FAILED
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=[event])
        notification_service.send_event = AsyncMock(return_value=False)

        before = datetime.utcnow()
        await dispatch.execute()

        assert event.attempts == 2
        assert event.next_attempt_at >= before + timedelta(seconds=60)
        assert event.next_attempt_at < before + timedelta(seconds=120)

    async def test_retry_delay_doubles(self, dispatch):
        assert dispatch.retry_delay(1) == timedelta(seconds=30)
        assert dispatch.retry_delay(2) == timedelta(seconds=60)
        assert dispatch.retry_delay(4) == timedelta(seconds=240)

    async def test_retry_after_failure_clears_error(self, dispatch, mock_outbox_repo):
        event = make_event("evt_retry", attempts=1)
        event.status = OutboxStatus.FAILED
        event.last_error = "timeout"
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=[event])

        await dispatch.execute()

        assert event.status == OutboxStatus.SENT
        assert event.attempts == 2
        assert event.last_error is None

    async def test_delivery_happens_between_two_transactions(self, dispatch, mock_outbox_repo, mock_uow):
        mock_outbox_repo.claim_deliverable = AsyncMock(return_value=[make_event("evt_1")])

        await dispatch.execute()

        assert mock_uow.run.await_count == 2
        assert mock_uow.commit.await_count == 2
