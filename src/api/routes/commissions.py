"""Commission API Routes

FastAPI routes for the consultant commission lifecycle.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from src.api.error import ClientError
from src.api.schemas.commission_request import (
    CommissionActionSchema,
    CommissionRequestSchema,
    DisputeRequestSchema,
    ProcessPaymentsRequestSchema,
    ResolveDisputeRequestSchema,
)
from src.app.use_cases.commission import (
    AwardCommission,
    ClawbackCommission,
    CommissionCommandDTO,
    CommissionDTO,
    CommissionPageDTO,
    ConfirmCommission,
    DisputeCommission,
    GetCommission,
    ListCommissions,
    MarkCommissionPaid,
    ProcessCommissionPayments,
    ProcessPaymentsResultDTO,
    RequestCommission,
    ResolveCommissionDispute,
)
from src.depends import LedgerContainer, get_container
from src.domain.commission import CommissionStatus
from src.domain.errors import LedgerError

router = APIRouter(prefix="/commissions", tags=["Commissions"])

_TRANSITION_ERROR = {
    "description": "Transition not allowed from the current status",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "INVALID_STATE_TRANSITION",
                    "message": "Cannot confirm commission in PAID status",
                }
            }
        }
    },
}


@router.post(
    "",
    response_model=CommissionDTO,
    status_code=status.HTTP_201_CREATED,
)
async def request_commission(
    request: CommissionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Create a PENDING commission.

    No money moves until the commission is confirmed. When `amount` is
    omitted it is computed from the job payment or subscription price
    times the consultant's rate, and frozen.
    """
    command = CommissionCommandDTO(**request.model_dump())
    return await RequestCommission(container.uow, container.commission_workflow).execute(command)


@router.post(
    "/award",
    response_model=CommissionDTO,
    status_code=status.HTTP_201_CREATED,
)
async def award_commission(
    request: CommissionRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Create a CONFIRMED commission and credit the consultant wallet.

    Idempotent per consultant and job/subscription: awarding twice returns
    the existing commission.
    """
    command = CommissionCommandDTO(**request.model_dump())
    use_case = AwardCommission(container.uow, container.commission_workflow)
    return await use_case.execute(command)


@router.get(
    "",
    response_model=CommissionPageDTO,
    status_code=status.HTTP_200_OK,
)
async def list_commissions(
    consultant_id: Optional[str] = None,
    region_id: Optional[str] = None,
    commission_status: Optional[CommissionStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    container: LedgerContainer = Depends(get_container),
):
    use_case = ListCommissions(container.commission_repo)
    return await use_case.execute(consultant_id, region_id, commission_status, limit, offset)


@router.get(
    "/{commission_id}",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
)
async def get_commission(commission_id: str, container: LedgerContainer = Depends(get_container)):
    return await GetCommission(container.commission_repo).execute(commission_id)


@router.post(
    "/{commission_id}/confirm",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
    responses={400: _TRANSITION_ERROR},
)
async def confirm_commission(
    commission_id: str,
    request: CommissionActionSchema,
    container: LedgerContainer = Depends(get_container),
):
    """PENDING -> CONFIRMED; credits the consultant wallet with COMMISSION_EARNED."""
    use_case = ConfirmCommission(container.uow, container.commission_workflow)
    return await use_case.execute(commission_id, created_by=request.created_by)


@router.post(
    "/{commission_id}/pay",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
    responses={400: _TRANSITION_ERROR},
)
async def mark_commission_paid(commission_id: str, container: LedgerContainer = Depends(get_container)):
    return await MarkCommissionPaid(container.uow, container.commission_workflow).execute(commission_id)


@router.post(
    "/{commission_id}/dispute",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
    responses={400: _TRANSITION_ERROR},
)
async def dispute_commission(
    commission_id: str,
    request: DisputeRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    return await DisputeCommission(container.uow, container.commission_workflow).execute(
        commission_id, request.reason
    )


@router.post(
    "/{commission_id}/resolve",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
    responses={400: _TRANSITION_ERROR},
)
async def resolve_dispute(
    commission_id: str,
    request: ResolveDisputeRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """Settle a dispute: VALID restores CONFIRMED, INVALID claws the amount back."""
    use_case = ResolveCommissionDispute(container.uow, container.commission_workflow)
    return await use_case.execute(
        commission_id, request.resolution, notes=request.notes, created_by=request.created_by
    )


@router.post(
    "/{commission_id}/clawback",
    response_model=CommissionDTO,
    status_code=status.HTTP_200_OK,
    responses={400: _TRANSITION_ERROR},
)
async def clawback_commission(
    commission_id: str,
    request: CommissionActionSchema,
    container: LedgerContainer = Depends(get_container),
):
    """
    Reverse a credited commission.

    The consultant wallet is debited with COMMISSION_CLAWBACK; the debit
    fails with INSUFFICIENT_BALANCE when the money was already withdrawn.
    """
    if not request.reason:
        raise ClientError(LedgerError("A clawback reason is required", code="VALIDATION_ERROR"))

    use_case = ClawbackCommission(container.uow, container.commission_workflow)
    return await use_case.execute(commission_id, request.reason, created_by=request.created_by)


@router.post(
    "/payments",
    response_model=ProcessPaymentsResultDTO,
    status_code=status.HTTP_200_OK,
)
async def process_commission_payments(
    request: ProcessPaymentsRequestSchema,
    container: LedgerContainer = Depends(get_container),
):
    """Mark a batch of CONFIRMED commissions as PAID; failures are reported per commission."""
    use_case = ProcessCommissionPayments(container.uow, container.commission_workflow)
    return await use_case.execute(request.commission_ids)
