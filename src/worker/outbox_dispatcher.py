"""Outbox Dispatcher Background Worker

Delivers domain events written by the ledger, pricing and commission use
cases. Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from typing import Optional

from config import ApplicationConfig
from src.adapter.repositories.outbox_repository import SqlAlchemyOutboxRepository
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.use_cases.events import DispatchOutboxEvents, DispatchResultDTO
from src.depends import build_engine, build_session_factory

logger = logging.getLogger(__name__)


class OutboxDispatcherWorker:
    """
    Background worker for outbox event delivery

    Features:
    - Logs every event, and posts it to NOTIFICATION_WEBHOOK when configured
    - Claims each batch, so several workers can run side by side
    - Retries failed deliveries with backoff up to OUTBOX_MAX_ATTEMPTS
    - Can run once or continuously

    Usage:
        worker = OutboxDispatcherWorker()
        await worker.run_once()

        await worker.run_forever(interval_seconds=10)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        webhook_url: Optional[str] = None,
        notification_service: Optional[NotificationService] = None,
        config=ApplicationConfig,
    ):
        self.config = config
        self.db_uri = db_uri or config.DB_URI
        self.engine = build_engine(self.db_uri)
        self.async_session_factory = build_session_factory(self.engine)
        self.notification_service = notification_service or create_notification_service(
            webhook_url or config.NOTIFICATION_WEBHOOK
        )

        logger.info(
            f"OutboxDispatcherWorker initialized with batch_size={config.OUTBOX_BATCH_SIZE}, "
            f"max_attempts={config.OUTBOX_MAX_ATTEMPTS}"
        )

    async def run_once(self) -> DispatchResultDTO:
        if not self.config.OUTBOX_DISPATCH_ENABLED:
            logger.info("Outbox dispatch is disabled, skipping")
            return DispatchResultDTO()

        async with self.async_session_factory() as session:
            use_case = DispatchOutboxEvents(
                uow=SqlAlchemyUnitOfWork(session),
                outbox_repo=SqlAlchemyOutboxRepository(session),
                notification_service=self.notification_service,
                batch_size=self.config.OUTBOX_BATCH_SIZE,
                max_attempts=self.config.OUTBOX_MAX_ATTEMPTS,
                claim_seconds=self.config.OUTBOX_CLAIM_SECONDS,
                retry_base_seconds=self.config.OUTBOX_RETRY_BASE_SECONDS,
            )
            return await use_case.execute()

    async def run_forever(self, interval_seconds: Optional[int] = None):
        interval_seconds = interval_seconds or self.config.OUTBOX_DISPATCH_INTERVAL_SECONDS
        logger.info(f"Starting outbox dispatch with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                if result.delivered or result.failed:
                    logger.info(
                        f"Dispatch cycle complete. Delivered {result.delivered}, failed {result.failed}"
                    )
            except Exception as e:
                logger.error(f"Dispatch cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()
        logger.info("OutboxDispatcherWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.outbox_dispatcher --once
        python -m src.worker.outbox_dispatcher --interval 30
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Outbox Dispatcher Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument("--interval", type=int, default=None, help="Seconds between dispatch cycles")
    args = parser.parse_args()

    worker = OutboxDispatcherWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print(f"Dispatch complete. Delivered {result.delivered}, failed {result.failed}.")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
