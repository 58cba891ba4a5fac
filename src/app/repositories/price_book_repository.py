"""Price Book Repository Interface

Read-only access to price books, products and tiers. Writes happen
out-of-band through admin tooling.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from src.domain.price_book import PriceBook, Product, PriceTier


class PriceBookRepository(ABC):

    @abstractmethod
    async def get_by_id(self, price_book_id: str) -> Optional[PriceBook]:
        pass

    @abstractmethod
    async def find_regional(
        self, pricing_peg: str, billing_currency: str, moment: datetime
    ) -> Optional[PriceBook]:
        """
        Best regional book for a currency pair

        Only active, approved, non-company books effective at `moment` are
        considered; the most recent effective_from wins.

        Args:
            pricing_peg: Pricing peg of the company
            billing_currency: Billing currency of the company
            moment: Point in time the book must be effective at

        Returns:
            PriceBook if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_global(self, moment: datetime) -> Optional[PriceBook]:
        """Most recent active, approved global book effective at `moment`"""
        pass

    @abstractmethod
    async def get_product_by_code(self, code: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_tiers(self, price_book_id: str, product_id: str) -> List[PriceTier]:
        pass

    @abstractmethod
    async def get_tiers_with_products(
        self, price_book_id: str, code_prefix: str
    ) -> List[Tuple[PriceTier, Product]]:
        """Tiers of a book whose active product code starts with `code_prefix`"""
        pass
