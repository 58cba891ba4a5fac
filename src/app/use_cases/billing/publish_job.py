"""PublishJob Use Case"""

import logging
from datetime import datetime
from typing import Optional
from src.app.repositories.job_repository import JobRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import JobNotFoundError
from src.domain.job import JobStatus
from .dtos import JobPaymentCommandDTO, PublishJobResultDTO
from .pay_for_job import PayForJobFromWallet

logger = logging.getLogger(__name__)


class PublishJob:
    """
    Use Case: Pay for a job and open it

    Business Rules:
    1. A job is opened only after its payment succeeded
    2. A failed payment reverts the job to DRAFT and stamps payment_failed_at;
       the job is never published unpaid
    3. Publishing an OPEN job is a no-op
    """

    def __init__(self, uow: UnitOfWork, job_repo: JobRepository, pay_for_job: PayForJobFromWallet):
        self.uow = uow
        self.job_repo = job_repo
        self.pay_for_job = pay_for_job

    async def execute(self, job_id: str, user_id: Optional[str] = None) -> PublishJobResultDTO:
        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise JobNotFoundError(f"Job {job_id} not found")

        if job.status == JobStatus.OPEN:
            return PublishJobResultDTO(job_id=job.id, status=job.status, payment_status=job.payment_status)

        # Step 1: Payment (own transaction)
        payment = await self.pay_for_job.execute(
            JobPaymentCommandDTO(
                company_id=job.company_id,
                job_id=job.id,
                salary_max=job.salary_max,
                service_package=job.service_package,
                user_id=user_id,
            )
        )

        # Step 2: Open on success, back to DRAFT on failure
        async def work():
            current = await self.job_repo.get_by_id(job_id, for_update=True)
            if payment.success:
                current.status = JobStatus.OPEN
            else:
                current.status = JobStatus.DRAFT
                current.payment_failed_at = datetime.utcnow()
            return await self.job_repo.update(current)

        job = await self.uow.run(work)

        if payment.success:
            logger.info(f"Job {job.id} published")
        else:
            logger.warning(f"Job {job.id} reverted to DRAFT: {payment.error}")

        return PublishJobResultDTO(
            job_id=job.id, status=job.status, payment_status=job.payment_status, payment=payment
        )
