from .virtual_account_repository import VirtualAccountRepository
from .virtual_transaction_repository import VirtualTransactionRepository
from .company_repository import CompanyRepository
from .country_pricing_map_repository import CountryPricingMapRepository
from .price_book_repository import PriceBookRepository
from .enterprise_override_repository import EnterpriseOverrideRepository
from .pricing_audit_log_repository import PricingAuditLogRepository
from .consultant_repository import ConsultantRepository
from .commission_repository import CommissionRepository
from .job_repository import JobRepository
from .subscription_repository import SubscriptionRepository
from .refund_request_repository import RefundRequestRepository
from .outbox_repository import OutboxRepository

__all__ = [
    "VirtualAccountRepository",
    "VirtualTransactionRepository",
    "CompanyRepository",
    "CountryPricingMapRepository",
    "PriceBookRepository",
    "EnterpriseOverrideRepository",
    "PricingAuditLogRepository",
    "ConsultantRepository",
    "CommissionRepository",
    "JobRepository",
    "SubscriptionRepository",
    "RefundRequestRepository",
    "OutboxRepository",
]
