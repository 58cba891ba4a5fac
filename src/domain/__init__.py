from .base import BaseModel, generate_uuid
from .virtual_account import VirtualAccount, AccountOwnerType, AccountStatus
from .virtual_transaction import (
    VirtualTransaction,
    TransactionType,
    TransactionDirection,
    TransactionStatus,
)
from .company import Company
from .country_pricing_map import CountryPricingMap
from .price_book import PriceBook, Product, PriceTier, ProductCategory
from .enterprise_override import EnterpriseOverride
from .pricing_audit_log import PricingAuditLog, PricingAuditAction
from .consultant import Consultant
from .commission import Commission, CommissionStatus, CommissionType, DisputeResolution
from .job import Job, JobStatus, JobPaymentStatus
from .subscription import Subscription, SubscriptionStatus, SubscriptionPlanType, BillingCycle
from .refund_request import RefundRequest, RefundStatus
from .outbox_event import OutboxEvent, OutboxStatus, EventType

__all__ = [
    "BaseModel",
    "generate_uuid",
    "VirtualAccount",
    "AccountOwnerType",
    "AccountStatus",
    "VirtualTransaction",
    "TransactionType",
    "TransactionDirection",
    "TransactionStatus",
    "Company",
    "CountryPricingMap",
    "PriceBook",
    "Product",
    "PriceTier",
    "ProductCategory",
    "EnterpriseOverride",
    "PricingAuditLog",
    "PricingAuditAction",
    "Consultant",
    "Commission",
    "CommissionStatus",
    "CommissionType",
    "DisputeResolution",
    "Job",
    "JobStatus",
    "JobPaymentStatus",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionPlanType",
    "BillingCycle",
    "RefundRequest",
    "RefundStatus",
    "OutboxEvent",
    "OutboxStatus",
    "EventType",
]
