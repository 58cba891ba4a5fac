"""PurchaseAddon Use Case

Charges an add-on service (extra job boost, assessment pack, ...) to a
wallet.
"""

import logging
from src.app.repositories.company_repository import CompanyRepository
from src.app.repositories.virtual_account_repository import VirtualAccountRepository
from src.app.services.ledger import PostingContext, VirtualLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.transaction_metadata import AddonDetails
from src.domain.virtual_account import AccountOwnerType
from src.domain.virtual_transaction import TransactionType
from .dtos import AddonPurchaseCommandDTO, TransactionDTO

logger = logging.getLogger(__name__)


class PurchaseAddon:
    """
    Use Case: Debit a wallet for an add-on service

    Business Rules:
    1. Company purchases are charged in the company's billing currency and
       validated against the currency lock
    2. Insufficient balance fails without any ledger effect
    """

    def __init__(
        self,
        uow: UnitOfWork,
        account_repo: VirtualAccountRepository,
        company_repo: CompanyRepository,
        ledger: VirtualLedger,
    ):
        self.uow = uow
        self.account_repo = account_repo
        self.company_repo = company_repo
        self.ledger = ledger

    async def execute(self, command: AddonPurchaseCommandDTO) -> TransactionDTO:
        async def work():
            context = PostingContext(
                reference_type="ADDON",
                reference_id=command.addon_name,
                description=command.description or f"Add-on: {command.addon_name}",
                created_by=command.created_by,
                details=AddonDetails(
                    addon_name=command.addon_name,
                    quantity=command.quantity,
                    description=command.description,
                ),
            )

            if command.owner_type == AccountOwnerType.COMPANY:
                company = await self.company_repo.get_by_id(command.owner_id)
                if company:
                    context.pricing_peg = company.pricing_peg
                    context.billing_currency = company.billing_currency

            account = await self.account_repo.get_or_create(command.owner_type, command.owner_id)
            return await self.ledger.post_debit(
                account.id, command.amount, TransactionType.ADDON_SERVICE_CHARGE, context
            )

        entry = await self.uow.run(work)
        logger.info(f"Add-on {command.addon_name} purchased by {command.owner_id} for {entry.amount}")
        return TransactionDTO.model_validate(entry)
