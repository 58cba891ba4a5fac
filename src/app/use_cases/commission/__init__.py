"""Commission use cases"""
from .create_commission import RequestCommission, AwardCommission
from .transitions import (
    ConfirmCommission,
    MarkCommissionPaid,
    DisputeCommission,
    ResolveCommissionDispute,
    ClawbackCommission,
)
from .queries import GetCommission, ListCommissions, ProcessCommissionPayments
from .dtos import (
    CommissionCommandDTO,
    CommissionDTO,
    CommissionPageDTO,
    CommissionPaymentFailureDTO,
    ProcessPaymentsResultDTO,
)

__all__ = [
    "RequestCommission",
    "AwardCommission",
    "ConfirmCommission",
    "MarkCommissionPaid",
    "DisputeCommission",
    "ResolveCommissionDispute",
    "ClawbackCommission",
    "GetCommission",
    "ListCommissions",
    "ProcessCommissionPayments",
    "CommissionCommandDTO",
    "CommissionDTO",
    "CommissionPageDTO",
    "CommissionPaymentFailureDTO",
    "ProcessPaymentsResultDTO",
]
