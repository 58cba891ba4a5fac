"""Commission transition use cases

Each transition locks the commission row and runs in its own unit of work
together with its ledger effect.
"""

from typing import Optional
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.unit_of_work import UnitOfWork
from src.domain.commission import DisputeResolution
from .dtos import CommissionDTO


class ConfirmCommission:
    """
    Use Case: PENDING -> CONFIRMED, crediting the consultant

    Confirming a CONFIRMED commission is a no-op; any other status fails
    with InvalidStateTransitionError.
    """

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, commission_id: str, created_by: Optional[str] = None) -> CommissionDTO:
        async def work():
            return await self.workflow.confirm(commission_id, created_by=created_by)

        return CommissionDTO.model_validate(await self.uow.run(work))


class MarkCommissionPaid:
    """Use Case: CONFIRMED -> PAID; payout marker only, no ledger effect"""

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, commission_id: str) -> CommissionDTO:
        async def work():
            return await self.workflow.mark_as_paid(commission_id)

        return CommissionDTO.model_validate(await self.uow.run(work))


class DisputeCommission:

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, commission_id: str, reason: str) -> CommissionDTO:
        async def work():
            return await self.workflow.dispute(commission_id, reason)

        return CommissionDTO.model_validate(await self.uow.run(work))


class ResolveCommissionDispute:
    """
    Use Case: Settle a DISPUTED commission

    VALID restores it to CONFIRMED; INVALID claws the credited amount back.
    """

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(
        self,
        commission_id: str,
        resolution: DisputeResolution,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> CommissionDTO:
        async def work():
            return await self.workflow.resolve_dispute(
                commission_id, resolution, notes=notes, created_by=created_by
            )

        return CommissionDTO.model_validate(await self.uow.run(work))


class ClawbackCommission:
    """
    Use Case: Reverse a commission

    PENDING commissions are cancelled without ledger effect; credited ones
    get a COMMISSION_CLAWBACK debit of the full amount, which fails with
    InsufficientBalanceError if the consultant has already withdrawn it.
    """

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, commission_id: str, reason: str, created_by: Optional[str] = None) -> CommissionDTO:
        async def work():
            return await self.workflow.clawback(commission_id, reason, created_by=created_by)

        return CommissionDTO.model_validate(await self.uow.run(work))
