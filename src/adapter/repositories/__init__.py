from .virtual_account_repository import SqlAlchemyVirtualAccountRepository
from .virtual_transaction_repository import SqlAlchemyVirtualTransactionRepository
from .company_repository import SqlAlchemyCompanyRepository
from .country_pricing_map_repository import SqlAlchemyCountryPricingMapRepository
from .price_book_repository import SqlAlchemyPriceBookRepository
from .enterprise_override_repository import SqlAlchemyEnterpriseOverrideRepository
from .pricing_audit_log_repository import SqlAlchemyPricingAuditLogRepository
from .consultant_repository import SqlAlchemyConsultantRepository
from .commission_repository import SqlAlchemyCommissionRepository
from .job_repository import SqlAlchemyJobRepository
from .subscription_repository import SqlAlchemySubscriptionRepository
from .refund_request_repository import SqlAlchemyRefundRequestRepository
from .outbox_repository import SqlAlchemyOutboxRepository

__all__ = [
    "SqlAlchemyVirtualAccountRepository",
    "SqlAlchemyVirtualTransactionRepository",
    "SqlAlchemyCompanyRepository",
    "SqlAlchemyCountryPricingMapRepository",
    "SqlAlchemyPriceBookRepository",
    "SqlAlchemyEnterpriseOverrideRepository",
    "SqlAlchemyPricingAuditLogRepository",
    "SqlAlchemyConsultantRepository",
    "SqlAlchemyCommissionRepository",
    "SqlAlchemyJobRepository",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyRefundRequestRepository",
    "SqlAlchemyOutboxRepository",
]
