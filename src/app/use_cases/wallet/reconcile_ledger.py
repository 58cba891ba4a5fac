"""ReconcileLedger Use Case

Reconciles wallet balances against ledger entries to detect discrepancies.
"""

import logging
import time
from datetime import datetime
from typing import List
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.repositories.virtual_transaction_repository import VirtualTransactionRepository
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile virtual accounts against their ledger entries

    Business Rules:
    1. Retrieves all virtual accounts
    2. For each account, expected balance = sum(CREDIT) - sum(DEBIT) over
       COMPLETED entries, with PENDING debits counted as held funds and
       FAILED entries ignored
    3. Compares the stored balance against the expected balance
    4. Records and logs any discrepancies found
    5. Does NOT modify any data (read-only reconciliation)

    Flow:
    1. Get all accounts
    2. For each account:
       a. Sum credits and debits of its entries
       b. Compare with the account's current balance
       c. If mismatch, record discrepancy
    3. Return reconciliation result with all discrepancies
    """

    def __init__(
        self,
        account_repo: VirtualAccountRepository,
        transaction_repo: VirtualTransactionRepository,
    ):
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo

    async def execute(self) -> ReconciliationResultDTO:
        """
        Execute ledger reconciliation

        Returns:
            ReconciliationResultDTO: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        logger.info("Starting wallet ledger reconciliation")

        # Step 1: Get all accounts
        accounts = await self.account_repo.get_all()
        total_accounts = len(accounts)

        logger.info(f"Found {total_accounts} accounts to reconcile")

        # Step 2: Check each account for discrepancies
        discrepancies: List[LedgerDiscrepancyDTO] = []

        for account in accounts:
            credits, debits = await self.transaction_repo.get_balance_components(account.id)
            calculated = credits - debits

            if account.balance != calculated:
                discrepancy_amount = account.balance - calculated
                discrepancies.append(
                    LedgerDiscrepancyDTO(
                        account_id=account.id,
                        owner_type=account.owner_type,
                        owner_id=account.owner_id,
                        account_balance=account.balance,
                        calculated_balance=calculated,
                        discrepancy=discrepancy_amount,
                    )
                )

                logger.warning(
                    f"Discrepancy found for {account.owner_type.value} {account.owner_id} "
                    f"(account_id={account.id}): "
                    f"account_balance={account.balance}, "
                    f"calculated_balance={calculated}, "
                    f"discrepancy={discrepancy_amount}"
                )

        # Step 3: Build response
        execution_time_ms = int((time.time() - start_time) * 1000)

        response = ReconciliationResultDTO(
            total_accounts_checked=total_accounts,
            discrepancies_found=len(discrepancies),
            discrepancies=discrepancies,
            reconciliation_time=reconciliation_time,
            execution_time_ms=execution_time_ms,
        )

        if discrepancies:
            logger.warning(
                f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                f"out of {total_accounts} accounts in {execution_time_ms}ms"
            )
        else:
            logger.info(
                f"Reconciliation complete. All {total_accounts} accounts balanced "
                f"in {execution_time_ms}ms"
            )

        return response
