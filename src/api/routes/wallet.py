"""Wallet API Routes

FastAPI routes for wallet balances, ledger history, payouts and refunds.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from src.api.error import ClientError
from src.api.schemas.wallet_request import (
    AddonPurchaseRequestSchema,
    AdjustmentRequestSchema,
    DecisionRequestSchema,
    RefundRequestSchema,
    TopUpRequestSchema,
    WithdrawalRequestSchema,
)
from src.app.services.ledger import PostingContext
from src.app.use_cases.wallet import (
    AddonPurchaseCommandDTO,
    ApproveRefund,
    ApproveWithdrawal,
    BalanceDTO,
    CreditAccount,
    DebitAccount,
    EarningsDTO,
    GetBalance,
    GetEarnings,
    GetOrCreateAccount,
    GetWalletStats,
    GetWithdrawalHistory,
    ListPendingWithdrawals,
    ListRefundRequests,
    ListTransactions,
    PostingCommandDTO,
    PurchaseAddon,
    RefundCommandDTO,
    RefundRequestDTO,
    RejectRefund,
    RejectWithdrawal,
    RequestRefund,
    RequestWithdrawal,
    TransactionDTO,
    TransactionPageDTO,
    WalletStatsDTO,
    WithdrawalCommandDTO,
)
from src.depends import LedgerContainer, get_container
from src.domain.errors import AccountNotFoundError, LedgerError
from src.domain.refund_request import RefundStatus
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionDirection, TransactionType

router = APIRouter(prefix="/wallet", tags=["Wallet"])

_ERROR_EXAMPLE = {
    "application/json": {
        "example": {
            "error": {
                "code": "INSUFFICIENT_BALANCE",
                "message": "Insufficient balance. Required: USD 1990.00, Available: USD 500.00",
            }
        }
    }
}


@router.get(
    "/accounts/{owner_type}/{owner_id}/balance",
    response_model=BalanceDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balance(
    owner_type: AccountOwnerType,
    owner_id: str,
    container: LedgerContainer = Depends(get_container),
):
    """
    Get the wallet balance of a company or consultant.

    The wallet is opened on first access, so a new owner reads a zero
    balance. Company wallets report the company's billing currency.
    """
    use_case = GetBalance(
        container.uow, container.account_repo, container.company_repo, container.config.DEFAULT_CURRENCY
    )
    return await use_case.execute(owner_type, owner_id)


@router.get(
    "/accounts/{owner_type}/{owner_id}/transactions",
    response_model=TransactionPageDTO,
    status_code=status.HTTP_200_OK,
)
async def list_transactions(
    owner_type: AccountOwnerType,
    owner_id: str,
    transaction_type: Optional[TransactionType] = Query(default=None, alias="type"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    """List ledger entries of a wallet, newest first."""
    use_case = ListTransactions(container.account_repo, container.transaction_repo)
    return await use_case.execute(owner_type, owner_id, transaction_type, limit, offset)


@router.get(
    "/accounts/{owner_type}/{owner_id}/earnings",
    response_model=EarningsDTO,
    status_code=status.HTTP_200_OK,
)
async def get_earnings(
    owner_type: AccountOwnerType,
    owner_id: str,
    container: LedgerContainer = Depends(get_container),
):
    use_case = GetEarnings(container.account_repo, container.transaction_repo)
    return await use_case.execute(owner_type, owner_id)


@router.post(
    "/accounts/{owner_type}/{owner_id}/topup",
    response_model=TransactionDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid amount or currency mismatch", "content": _ERROR_EXAMPLE}},
)
async def top_up(
    owner_type: AccountOwnerType,
    owner_id: str,
    request: TopUpRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Add funds to a wallet.

    **Request body:**
    - `amount` (required): Amount to add (must be > 0, at most 2 decimals)
    - `currency` (optional): Payment currency; the first company payment
      in a currency locks the company's billing currency
    - `payment_reference` (optional): External payment id
    """
    account = await GetOrCreateAccount(container.uow, container.account_repo).execute(owner_type, owner_id)
    command = PostingCommandDTO(
        account_id=account.id,
        amount=request.amount,
        transaction_type=TransactionType.WALLET_TOPUP,
        context=PostingContext(
            reference_type="PAYMENT" if request.payment_reference else None,
            reference_id=request.payment_reference,
            description="Wallet top-up",
            created_by=request.created_by,
            billing_currency=request.currency.upper() if request.currency else None,
        ),
    )
    return await CreditAccount(container.uow, container.ledger).execute(command)


@router.post(
    "/accounts/{owner_type}/{owner_id}/adjustments",
    response_model=TransactionDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid amount or insufficient balance", "content": _ERROR_EXAMPLE}},
)
async def adjust_balance(
    owner_type: AccountOwnerType,
    owner_id: str,
    request: AdjustmentRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """Post an ADMIN_ADJUSTMENT credit or debit on an existing wallet."""
    account = await container.account_repo.get_by_owner(owner_type, owner_id)
    if not account:
        raise AccountNotFoundError(f"No virtual account for {owner_type.value} {owner_id}")

    command = PostingCommandDTO(
        account_id=account.id,
        amount=request.amount,
        transaction_type=TransactionType.ADMIN_ADJUSTMENT,
        context=PostingContext(
            reference_type="ADMIN",
            reference_id=request.admin_id,
            description=request.reason,
            created_by=request.admin_id,
        ),
    )
    if request.direction == TransactionDirection.CREDIT:
        return await CreditAccount(container.uow, container.ledger).execute(command)
    return await DebitAccount(container.uow, container.ledger).execute(command)


@router.post(
    "/withdrawals",
    response_model=TransactionDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Insufficient balance", "content": _ERROR_EXAMPLE}},
)
async def request_withdrawal(
    request: WithdrawalRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Request a payout.

    The amount is held immediately as a PENDING withdrawal; the balance
    drops now and is restored only if an admin rejects the request.
    """
    command = WithdrawalCommandDTO(
        owner_type=request.owner_type,
        owner_id=request.owner_id,
        amount=request.amount,
        payment_method=request.payment_method,
        bank_details=request.bank_details,
        notes=request.notes,
    )
    use_case = RequestWithdrawal(container.uow, container.account_repo, container.ledger, container.outbox_repo)
    return await use_case.execute(command)


@router.get(
    "/withdrawals/pending",
    response_model=List[TransactionDTO],
    status_code=status.HTTP_200_OK,
)
async def list_pending_withdrawals(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    return await ListPendingWithdrawals(container.transaction_repo).execute(limit, offset)


@router.get(
    "/accounts/{owner_type}/{owner_id}/withdrawals",
    response_model=TransactionPageDTO,
    status_code=status.HTTP_200_OK,
)
async def get_withdrawal_history(
    owner_type: AccountOwnerType,
    owner_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    use_case = GetWithdrawalHistory(container.account_repo, container.transaction_repo)
    return await use_case.execute(owner_type, owner_id, limit, offset)


@router.post(
    "/withdrawals/{transaction_id}/approve",
    response_model=TransactionDTO,
    status_code=status.HTTP_200_OK,
)
async def approve_withdrawal(
    transaction_id: str,
    request: DecisionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    use_case = ApproveWithdrawal(
        container.uow, container.transaction_repo, container.ledger, container.outbox_repo
    )
    return await use_case.execute(transaction_id, request.admin_id)


@router.post(
    "/withdrawals/{transaction_id}/reject",
    response_model=TransactionDTO,
    status_code=status.HTTP_200_OK,
)
async def reject_withdrawal(
    transaction_id: str,
    request: DecisionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """Reject a held withdrawal and return the funds to the wallet."""
    if not request.reason:
        raise ClientError(LedgerError("A rejection reason is required", code="VALIDATION_ERROR"))

    use_case = RejectWithdrawal(
        container.uow, container.transaction_repo, container.ledger, container.outbox_repo
    )
    return await use_case.execute(transaction_id, request.reason, request.admin_id)


@router.post(
    "/refunds",
    response_model=RefundRequestDTO,
    status_code=status.HTTP_201_CREATED,
)
async def request_refund(
    request: RefundRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Ask for a refund of a completed charge.

    Only job, subscription and add-on charges of the company's own wallet
    can be refunded, each at most once.
    """
    use_case = RequestRefund(
        container.uow,
        container.account_repo,
        container.transaction_repo,
        container.refund_repo,
        container.outbox_repo,
    )
    return await use_case.execute(
        RefundCommandDTO(
            company_id=request.company_id,
            transaction_id=request.transaction_id,
            reason=request.reason,
        )
    )


@router.get(
    "/refunds",
    response_model=List[RefundRequestDTO],
    status_code=status.HTTP_200_OK,
)
async def list_refund_requests(
    company_id: Optional[str] = None,
    refund_status: Optional[RefundStatus] = Query(default=None, alias="status"),
    container: LedgerContainer = Depends(get_container),
):
    return await ListRefundRequests(container.refund_repo).execute(company_id, refund_status)


@router.post(
    "/refunds/{request_id}/approve",
    response_model=RefundRequestDTO,
    status_code=status.HTTP_200_OK,
)
async def approve_refund(
    request_id: str,
    request: DecisionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    use_case = ApproveRefund(
        container.uow,
        container.transaction_repo,
        container.refund_repo,
        container.ledger,
        container.outbox_repo,
    )
    return await use_case.execute(request_id, request.admin_id, request.notes)


@router.post(
    "/refunds/{request_id}/reject",
    response_model=RefundRequestDTO,
    status_code=status.HTTP_200_OK,
)
async def reject_refund(
    request_id: str,
    request: DecisionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    if not request.reason:
        raise ClientError(LedgerError("A rejection reason is required", code="VALIDATION_ERROR"))

    use_case = RejectRefund(container.uow, container.refund_repo, container.outbox_repo)
    return await use_case.execute(request_id, request.admin_id, request.reason)


@router.post(
    "/addons",
    response_model=TransactionDTO,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Insufficient balance", "content": _ERROR_EXAMPLE}},
)
async def purchase_addon(
    request: AddonPurchaseRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    use_case = PurchaseAddon(container.uow, container.account_repo, container.company_repo, container.ledger)
    return await use_case.execute(AddonPurchaseCommandDTO(**request.model_dump()))


@router.get(
    "/stats",
    response_model=WalletStatsDTO,
    status_code=status.HTTP_200_OK,
)
async def get_wallet_stats(container: LedgerContainer = Depends(get_container)):
    """Platform-wide wallet totals per owner type and pending payouts."""
    return await GetWalletStats(container.account_repo, container.transaction_repo).execute()
