"""Ledger Reconciliation Background Worker

Periodically checks every wallet balance against its ledger history.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from src.adapter.repositories.virtual_account_repository import SqlAlchemyVirtualAccountRepository
from src.adapter.repositories.virtual_transaction_repository import SqlAlchemyVirtualTransactionRepository
from src.app.use_cases.wallet import ReconcileLedger, ReconciliationResultDTO
from src.depends import build_engine, build_session_factory

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker:
    """
    Background worker for wallet ledger reconciliation

    Features:
    - Compares account balances against the sum of their ledger entries
    - Logs discrepancies for investigation; never corrects balances
    - Can run once or continuously

    Usage:
        worker = LedgerReconcilerWorker()
        result = await worker.run_once()

        await worker.run_forever(interval_seconds=86400)
    """

    def __init__(self, db_uri: Optional[str] = None, config=ApplicationConfig):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to config.DB_URI)
            config: Settings class
        """
        self.config = config
        self.db_uri = db_uri or config.DB_URI
        self.engine = build_engine(self.db_uri)
        self.async_session_factory = build_session_factory(self.engine)

        logger.info("LedgerReconcilerWorker initialized")

    async def run_once(self) -> ReconciliationResultDTO:
        if not self.config.RECONCILIATION_ENABLED:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_accounts_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedger(
                account_repo=SqlAlchemyVirtualAccountRepository(session),
                transaction_repo=SqlAlchemyVirtualTransactionRepository(session),
            )
            try:
                response = await use_case.execute()
            finally:
                await session.rollback()

        if response.discrepancies_found > 0:
            logger.error(f"ALERT: {response.discrepancies_found} ledger discrepancies found!")
            for d in response.discrepancies:
                logger.error(
                    f"  - {d.owner_type.value} {d.owner_id} (account_id={d.account_id}): "
                    f"expected={d.calculated_balance}, actual={d.account_balance}, "
                    f"diff={d.discrepancy}"
                )

        return response

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between runs (default: RECONCILIATION_INTERVAL_SECONDS)
        """
        interval_seconds = interval_seconds or self.config.RECONCILIATION_INTERVAL_SECONDS
        logger.info(f"Starting continuous ledger reconciliation with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_accounts_checked} accounts, "
                    f"found {result.discrepancies_found} discrepancies "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()
        logger.info("LedgerReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.ledger_reconciler --once
        python -m src.worker.ledger_reconciler --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Ledger Reconciliation Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=None,
        help="Interval between runs in seconds (default: RECONCILIATION_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = LedgerReconcilerWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Total accounts checked: {result.total_accounts_checked}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
