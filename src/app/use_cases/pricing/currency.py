"""Currency Assignment Use Cases

Transactional wrappers around CurrencyAssignmentService.
"""

import logging
from src.app.services.currency_assignment import CompanyCurrencies, CurrencyAssignmentService
from src.app.services.unit_of_work import UnitOfWork
from .dtos import EmergencyOverrideCommandDTO, EnterpriseOverrideDTO

logger = logging.getLogger(__name__)


class AssignCurrency:
    """
    Use Case: Assign a company's pricing peg and billing currency from its country

    Business Rules:
    1. Fails with CurrencyLockedError once the currency is locked
    2. Unmapped or inactive countries default to USD
    3. Every assignment is written to the pricing audit log
    """

    def __init__(self, uow: UnitOfWork, currency_service: CurrencyAssignmentService):
        self.uow = uow
        self.currency_service = currency_service

    async def execute(self, company_id: str, country: str, actor_id: str = None) -> CompanyCurrencies:
        async def work():
            return await self.currency_service.assign(company_id, country, actor_id=actor_id)

        return await self.uow.run(work)


class LockCurrency:
    """Use Case: Lock a company's currencies; already locked is not an error"""

    def __init__(self, uow: UnitOfWork, currency_service: CurrencyAssignmentService):
        self.uow = uow
        self.currency_service = currency_service

    async def execute(self, company_id: str) -> bool:
        async def work():
            return await self.currency_service.lock_currency(company_id)

        return await self.uow.run(work)


class ValidateCurrencyLock:
    """Use Case: Fail with CurrencyMismatchError when a locked company would be charged in another currency"""

    def __init__(self, currency_service: CurrencyAssignmentService):
        self.currency_service = currency_service

    async def execute(self, company_id: str, currency: str) -> None:
        await self.currency_service.validate_currency_lock(company_id, currency)


class GetCompanyCurrencies:

    def __init__(self, currency_service: CurrencyAssignmentService):
        self.currency_service = currency_service

    async def execute(self, company_id: str) -> CompanyCurrencies:
        return await self.currency_service.get_company_currencies(company_id)


class EmergencyOverride:
    """
    Use Case: Rewrite a company's currencies and clear the lock

    The only sanctioned way around the currency lock. The override, the
    audit entry, the company update and the notification event commit
    together or not at all.
    """

    def __init__(self, uow: UnitOfWork, currency_service: CurrencyAssignmentService):
        self.uow = uow
        self.currency_service = currency_service

    async def execute(self, command: EmergencyOverrideCommandDTO) -> EnterpriseOverrideDTO:
        async def work():
            return await self.currency_service.emergency_override(
                command.company_id,
                command.pricing_peg,
                command.billing_currency,
                command.admin_id,
                command.reason,
            )

        override = await self.uow.run(work)
        return EnterpriseOverrideDTO.model_validate(override)
