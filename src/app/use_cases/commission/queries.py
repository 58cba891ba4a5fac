"""Commission read use cases and bulk payout"""

import logging
from typing import List, Optional
from src.app.repositories.commission_repository import CommissionRepository
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.unit_of_work import UnitOfWork
from src.domain.commission import CommissionStatus
from src.domain.errors import CommissionNotFoundError, LedgerError
from .dtos import CommissionDTO, CommissionPageDTO, CommissionPaymentFailureDTO, ProcessPaymentsResultDTO

logger = logging.getLogger(__name__)


class GetCommission:

    def __init__(self, commission_repo: CommissionRepository):
        self.commission_repo = commission_repo

    async def execute(self, commission_id: str) -> CommissionDTO:
        commission = await self.commission_repo.get_by_id(commission_id)
        if not commission:
            raise CommissionNotFoundError(f"Commission {commission_id} not found")
        return CommissionDTO.model_validate(commission)


class ListCommissions:

    def __init__(self, commission_repo: CommissionRepository):
        self.commission_repo = commission_repo

    async def execute(
        self,
        consultant_id: Optional[str] = None,
        region_id: Optional[str] = None,
        status: Optional[CommissionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> CommissionPageDTO:
        commissions, total = await self.commission_repo.list(
            consultant_id=consultant_id, region_id=region_id, status=status, limit=limit, offset=offset
        )
        return CommissionPageDTO(
            commissions=[CommissionDTO.model_validate(c) for c in commissions],
            total=total,
            limit=limit,
            offset=offset,
        )


class ProcessCommissionPayments:
    """
    Use Case: Mark a batch of CONFIRMED commissions as PAID

    Business Rules:
    1. Each commission is marked in its own transaction
    2. A commission that cannot be marked (not found, wrong status) is
       reported and the batch continues
    """

    def __init__(self, uow: UnitOfWork, workflow: CommissionWorkflow):
        self.uow = uow
        self.workflow = workflow

    async def execute(self, commission_ids: List[str]) -> ProcessPaymentsResultDTO:
        result = ProcessPaymentsResultDTO()

        for commission_id in commission_ids:
            async def work():
                return await self.workflow.mark_as_paid(commission_id)

            try:
                commission = await self.uow.run(work)
            except LedgerError as e:
                logger.warning(f"Commission {commission_id} not paid: {e.message}")
                result.failed.append(
                    CommissionPaymentFailureDTO(commission_id=commission_id, code=e.code, message=e.message)
                )
                continue

            result.paid.append(CommissionDTO.model_validate(commission))

        logger.info(f"Processed commission payments: {len(result.paid)} paid, {len(result.failed)} failed")
        return result
