"""Pricing Audit Log Repository Interface

Append-only: no update or delete operations exist.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.pricing_audit_log import PricingAuditLog


class PricingAuditLogRepository(ABC):

    @abstractmethod
    async def create(self, entry: PricingAuditLog) -> PricingAuditLog:
        pass

    @abstractmethod
    async def list_by_company(self, company_id: str) -> List[PricingAuditLog]:
        pass
