"""Refund Request Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.refund_request import RefundRequest, RefundStatus


class RefundRequestRepository(ABC):

    @abstractmethod
    async def create(self, request: RefundRequest) -> RefundRequest:
        pass

    @abstractmethod
    async def update(self, request: RefundRequest) -> RefundRequest:
        pass

    @abstractmethod
    async def get_by_id(self, request_id: str, for_update: bool = False) -> Optional[RefundRequest]:
        pass

    @abstractmethod
    async def get_pending_for_transaction(self, transaction_id: str) -> Optional[RefundRequest]:
        pass

    @abstractmethod
    async def list(
        self, company_id: Optional[str] = None, status: Optional[RefundStatus] = None
    ) -> List[RefundRequest]:
        pass
