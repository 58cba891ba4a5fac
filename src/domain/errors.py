"""Domain errors

Every failure of the ledger, pricing and commission core is raised as a
LedgerError carrying a stable code, a user-facing message, an optional
technical reason and the HTTP status the API layer renders it with.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for synchronous domain failures"""

    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message: str, reason: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        if code:
            self.code = code

    def to_dict(self) -> dict:
        """Client-facing body; the technical reason stays in the logs"""
        return {"code": self.code, "message": self.message}


class NotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = 404


class AccountNotFoundError(NotFoundError):
    code = "ACCOUNT_NOT_FOUND"


class TransactionNotFoundError(NotFoundError):
    code = "TRANSACTION_NOT_FOUND"


class CompanyNotFoundError(NotFoundError):
    code = "COMPANY_NOT_FOUND"


class ConsultantNotFoundError(NotFoundError):
    code = "CONSULTANT_NOT_FOUND"


class CommissionNotFoundError(NotFoundError):
    code = "COMMISSION_NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    code = "PRODUCT_NOT_FOUND"


class JobNotFoundError(NotFoundError):
    code = "JOB_NOT_FOUND"


class SubscriptionNotFoundError(NotFoundError):
    code = "SUBSCRIPTION_NOT_FOUND"


class RefundRequestNotFoundError(NotFoundError):
    code = "REFUND_REQUEST_NOT_FOUND"


class InvalidAmountError(LedgerError):
    code = "INVALID_AMOUNT"


class InsufficientBalanceError(LedgerError):
    """Debit exceeds the available balance"""

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, required: Decimal, available: Decimal, currency: Optional[str] = None):
        self.required = required
        self.available = available
        self.shortfall = required - available
        self.currency = currency
        prefix = f"{currency} " if currency else ""
        super().__init__(
            f"Insufficient balance. Required: {prefix}{required:.2f}, "
            f"Available: {prefix}{available:.2f}",
            reason=f"shortfall={self.shortfall}",
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            required=str(self.required),
            available=str(self.available),
            shortfall=str(self.shortfall),
        )
        return data


class AccountInactiveError(LedgerError):
    code = "ACCOUNT_INACTIVE"
    status_code = 403


class CurrencyLockedError(LedgerError):
    code = "CURRENCY_LOCKED"


class CurrencyMismatchError(LedgerError):
    """Payment currency differs from the company's locked billing currency"""

    code = "CURRENCY_MISMATCH"

    def __init__(self, locked_currency: str, requested_currency: str):
        self.locked_currency = locked_currency
        self.requested_currency = requested_currency
        super().__init__(
            f"Currency mismatch. Company billing currency is locked to {locked_currency}. "
            f"Cannot process payment in {requested_currency}.",
            reason=f"locked={locked_currency}, requested={requested_currency}",
        )


class InvalidStateTransitionError(LedgerError):
    code = "INVALID_STATE_TRANSITION"

    def __init__(self, entity: str, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} {entity} in {current} status", reason=f"status={current}")


class QuotaExhaustedError(LedgerError):
    code = "QUOTA_EXHAUSTED"


class PricingConfigurationError(LedgerError):
    """Pricing data is missing; an operator has to fix the configuration"""

    code = "PRICING_UNAVAILABLE"
    status_code = 500
    public_message = "Pricing is currently unavailable. Please contact support."

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.public_message}


class NoPriceBookFoundError(PricingConfigurationError):
    code = "NO_PRICE_BOOK"


class NoTierFoundError(PricingConfigurationError):
    code = "NO_PRICE_TIER"
    status_code = 404
