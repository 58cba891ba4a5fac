"""Pricing use cases"""
from .currency import (
    AssignCurrency,
    LockCurrency,
    ValidateCurrencyLock,
    GetCompanyCurrencies,
    EmergencyOverride,
)
from .quotes import GetEffectivePriceBook, GetPriceForProduct, GetSubscriptionPrice, GetJobPrice
from .dtos import (
    EmergencyOverrideCommandDTO,
    EnterpriseOverrideDTO,
    PriceBookDTO,
    EffectivePriceBookDTO,
    PriceQuoteDTO,
    JobPriceDTO,
)

__all__ = [
    "AssignCurrency",
    "LockCurrency",
    "ValidateCurrencyLock",
    "GetCompanyCurrencies",
    "EmergencyOverride",
    "GetEffectivePriceBook",
    "GetPriceForProduct",
    "GetSubscriptionPrice",
    "GetJobPrice",
    "EmergencyOverrideCommandDTO",
    "EnterpriseOverrideDTO",
    "PriceBookDTO",
    "EffectivePriceBookDTO",
    "PriceQuoteDTO",
    "JobPriceDTO",
]
