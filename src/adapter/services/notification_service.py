"""Notification Service Implementations

Provides concrete implementations for delivering outbox events.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationService
from src.domain.outbox_event import OutboxEvent

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs events

    Useful for development and testing, or as a fallback.
    """

    async def send_event(self, event: OutboxEvent) -> bool:
        logger.info(
            f"[EVENT] {event.event_type.value} "
            f"{event.aggregate_type}/{event.aggregate_id}: {event.payload}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts events to an HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST events to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_event(self, event: OutboxEvent) -> bool:
        """
        Deliver event via webhook

        Args:
            event: OutboxEvent to deliver

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": event.event_type.value,
            "event_id": event.id,
            "aggregate_type": event.aggregate_type,
            "aggregate_id": event.aggregate_id,
            "data": event.data,
            "created_at": event.created_at.isoformat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(f"Webhook delivered event {event.id} to {self.webhook_url}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to deliver event {event.id} via webhook: {e}")
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_event(self, event: OutboxEvent) -> bool:
        """
        Deliver to every channel

        Returns:
            True only if every channel succeeded, so the event is retried otherwise
        """
        delivered = True
        for service in self.services:
            try:
                if not await service.send_event(event):
                    delivered = False
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
                delivered = False
        return delivered


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
