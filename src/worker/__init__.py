"""Background workers for the wallet service"""
from .ledger_reconciler import LedgerReconcilerWorker
from .outbox_dispatcher import OutboxDispatcherWorker

__all__ = ["LedgerReconcilerWorker", "OutboxDispatcherWorker"]
