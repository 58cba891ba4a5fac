"""Wallet use cases"""
from .accounts import GetOrCreateAccount, CreditAccount, DebitAccount, GetBalance
from .transactions import ListTransactions, GetEarnings
from .withdrawals import (
    RequestWithdrawal,
    ApproveWithdrawal,
    RejectWithdrawal,
    ListPendingWithdrawals,
    GetWithdrawalHistory,
)
from .refunds import RequestRefund, ApproveRefund, RejectRefund, ListRefundRequests
from .purchase_addon import PurchaseAddon
from .get_wallet_stats import GetWalletStats
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    AccountDTO,
    TransactionDTO,
    PostingCommandDTO,
    BalanceDTO,
    TransactionPageDTO,
    EarningsDTO,
    WithdrawalCommandDTO,
    RefundCommandDTO,
    RefundRequestDTO,
    AddonPurchaseCommandDTO,
    OwnerTypeStatsDTO,
    WalletStatsDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "GetOrCreateAccount",
    "CreditAccount",
    "DebitAccount",
    "GetBalance",
    "ListTransactions",
    "GetEarnings",
    "RequestWithdrawal",
    "ApproveWithdrawal",
    "RejectWithdrawal",
    "ListPendingWithdrawals",
    "GetWithdrawalHistory",
    "RequestRefund",
    "ApproveRefund",
    "RejectRefund",
    "ListRefundRequests",
    "PurchaseAddon",
    "GetWalletStats",
    "ReconcileLedger",
    "AccountDTO",
    "TransactionDTO",
    "PostingCommandDTO",
    "BalanceDTO",
    "TransactionPageDTO",
    "EarningsDTO",
    "WithdrawalCommandDTO",
    "RefundCommandDTO",
    "RefundRequestDTO",
    "AddonPurchaseCommandDTO",
    "OwnerTypeStatsDTO",
    "WalletStatsDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
