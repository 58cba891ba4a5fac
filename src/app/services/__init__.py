from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .currency_assignment import CurrencyAssignmentService, CompanyCurrencies
from .price_book_selection import PriceBookSelectionService, PriceQuote, ResolutionSource, ResolvedPriceBook
from .salary_band import SalaryBandService, ExecutiveBand, JobBand, JobQuote
from .ledger import VirtualLedger, PostingContext
from .commission_workflow import CommissionWorkflow

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "CurrencyAssignmentService",
    "CompanyCurrencies",
    "PriceBookSelectionService",
    "PriceQuote",
    "ResolutionSource",
    "ResolvedPriceBook",
    "SalaryBandService",
    "ExecutiveBand",
    "JobBand",
    "JobQuote",
    "VirtualLedger",
    "PostingContext",
    "CommissionWorkflow",
]
