"""Job and subscription billing use cases"""
from .pay_for_job import PayForJobFromWallet
from .publish_job import PublishJob
from .refund_job_payment import RefundJobPayment
from .subscriptions import CreateSubscription, UseSubscriptionQuota, RenewSubscription, CancelSubscription
from .dtos import (
    JobPaymentCommandDTO,
    JobPricingDTO,
    JobPaymentResultDTO,
    PublishJobResultDTO,
    JobRefundCommandDTO,
    CreateSubscriptionCommandDTO,
    SubscriptionDTO,
)

__all__ = [
    "PayForJobFromWallet",
    "PublishJob",
    "RefundJobPayment",
    "CreateSubscription",
    "UseSubscriptionQuota",
    "RenewSubscription",
    "CancelSubscription",
    "JobPaymentCommandDTO",
    "JobPricingDTO",
    "JobPaymentResultDTO",
    "PublishJobResultDTO",
    "JobRefundCommandDTO",
    "CreateSubscriptionCommandDTO",
    "SubscriptionDTO",
]
