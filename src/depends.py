from decimal import Decimal
from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyCommissionRepository,
    SqlAlchemyCompanyRepository,
    SqlAlchemyConsultantRepository,
    SqlAlchemyCountryPricingMapRepository,
    SqlAlchemyEnterpriseOverrideRepository,
    SqlAlchemyJobRepository,
    SqlAlchemyOutboxRepository,
    SqlAlchemyPriceBookRepository,
    SqlAlchemyPricingAuditLogRepository,
    SqlAlchemyRefundRequestRepository,
    SqlAlchemySubscriptionRepository,
    SqlAlchemyVirtualAccountRepository,
    SqlAlchemyVirtualTransactionRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.commission_workflow import CommissionWorkflow
from src.app.services.currency_assignment import CurrencyAssignmentService
from src.app.services.ledger import VirtualLedger
from src.app.services.price_book_selection import PriceBookSelectionService
from src.app.services.salary_band import SalaryBandService


def build_engine(db_uri: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine

    SQLite has no SELECT FOR UPDATE, so every SQLite transaction starts with
    BEGIN IMMEDIATE: writers take the database lock up front and serialise.
    """
    is_sqlite = db_uri.startswith("sqlite")
    connect_args = {"timeout": 30} if is_sqlite else {}
    engine = create_async_engine(db_uri, echo=echo, future=True, connect_args=connect_args)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine(ApplicationConfig.DB_URI, echo=ApplicationConfig.DB_ECHO)

AsyncSessionLocal = build_session_factory(engine)


class LedgerContainer:
    """
    Object graph for one session

    Every repository and service shares the session, so whatever a use case
    does through them commits or rolls back together via `uow`.
    """

    def __init__(self, session: AsyncSession, config=ApplicationConfig):
        self.session = session
        self.config = config
        self.uow = SqlAlchemyUnitOfWork(session)

        self.account_repo = SqlAlchemyVirtualAccountRepository(session)
        self.transaction_repo = SqlAlchemyVirtualTransactionRepository(session)
        self.company_repo = SqlAlchemyCompanyRepository(session)
        self.country_map_repo = SqlAlchemyCountryPricingMapRepository(session)
        self.price_book_repo = SqlAlchemyPriceBookRepository(session)
        self.override_repo = SqlAlchemyEnterpriseOverrideRepository(session)
        self.audit_repo = SqlAlchemyPricingAuditLogRepository(session)
        self.consultant_repo = SqlAlchemyConsultantRepository(session)
        self.commission_repo = SqlAlchemyCommissionRepository(session)
        self.job_repo = SqlAlchemyJobRepository(session)
        self.subscription_repo = SqlAlchemySubscriptionRepository(session)
        self.refund_repo = SqlAlchemyRefundRequestRepository(session)
        self.outbox_repo = SqlAlchemyOutboxRepository(session)

        self.currency_service = CurrencyAssignmentService(
            self.company_repo,
            self.country_map_repo,
            self.audit_repo,
            self.override_repo,
            self.outbox_repo,
            default_currency=config.DEFAULT_CURRENCY,
        )
        self.price_book_service = PriceBookSelectionService(
            self.company_repo,
            self.price_book_repo,
            self.override_repo,
            default_currency=config.DEFAULT_CURRENCY,
        )
        self.salary_band_service = SalaryBandService(
            self.company_repo,
            self.price_book_repo,
            self.price_book_service,
            thresholds=config.EXECUTIVE_SEARCH_THRESHOLDS,
            default_threshold=config.EXECUTIVE_SEARCH_DEFAULT_THRESHOLD,
            default_version=config.DEFAULT_PRICE_BOOK_VERSION,
        )
        self.ledger = VirtualLedger(self.account_repo, self.transaction_repo, self.currency_service)
        self.commission_workflow = CommissionWorkflow(
            self.commission_repo,
            self.consultant_repo,
            self.job_repo,
            self.subscription_repo,
            self.account_repo,
            self.ledger,
            self.outbox_repo,
            default_rate=Decimal(str(config.DEFAULT_COMMISSION_RATE)),
        )


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_container(session: AsyncSession = Depends(get_session)) -> LedgerContainer:
    return LedgerContainer(session)
