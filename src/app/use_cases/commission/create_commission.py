"""Commission creation use cases

RequestCommission records a PENDING commission with no ledger effect.
AwardCommission creates it CONFIRMED and credits the consultant's wallet
in the same transaction.
"""

import logging
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.unit_of_work import UnitOfWork
from .dtos import CommissionCommandDTO, CommissionDTO

logger = logging.getLogger(__name__)


class RequestCommission:

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, command: CommissionCommandDTO) -> CommissionDTO:
        async def work():
            commission = await self.workflow.build_commission(
                command.consultant_id,
                command.commission_type,
                job_id=command.job_id,
                subscription_id=command.subscription_id,
                amount=command.amount,
                rate=command.rate,
                currency=command.currency,
                description=command.description,
            )
            return await self.workflow.create_pending(commission)

        commission = await self.uow.run(work)
        return CommissionDTO.model_validate(commission)


class AwardCommission:
    """
    Use Case: Award a commission and credit the consultant immediately

    Business Rules:
    1. Amount is computed once, at creation, and never recomputed
    2. Award is idempotent per (consultant, type, job, subscription): an
       existing commission that was not cancelled or clawed back is returned
       as is
    3. Commission row, COMMISSION_EARNED credit and event commit together

    Flow:
    1. Lock the source row, then look for a live commission for it
    2. Compute amount (source payment x rate, rounded half-up to cents)
    3. Create CONFIRMED commission
    4. Credit the consultant wallet (reference COMMISSION/<id>)
    5. Commit
    """

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, command: CommissionCommandDTO) -> CommissionDTO:
        async def work():
            commission, _ = await self.workflow.award(
                command.consultant_id,
                command.commission_type,
                job_id=command.job_id,
                subscription_id=command.subscription_id,
                amount=command.amount,
                rate=command.rate,
                currency=command.currency,
                description=command.description,
                created_by=command.created_by,
            )
            return commission

        commission = await self.uow.run(work)
        return CommissionDTO.model_validate(commission)
