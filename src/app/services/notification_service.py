"""Notification Service Interface

Defines the contract for delivering committed domain events to the
collaborators that react to them (email, dashboards, webhooks).
"""

from abc import ABC, abstractmethod
from src.domain.outbox_event import OutboxEvent


class NotificationService(ABC):
    """
    Abstract notification service for domain events

    Implementations can deliver via:
    - Logging
    - Webhook (HTTP POST)
    - a message broker
    """

    @abstractmethod
    async def send_event(self, event: OutboxEvent) -> bool:
        """
        Deliver one outbox event

        Args:
            event: OutboxEvent to deliver

        Returns:
            True if delivered successfully, False otherwise
        """
        pass
