"""SQLAlchemy Price Book Repository Implementation

Resolution queries over price books, products and tiers.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.price_book_repository import PriceBookRepository
from src.domain.price_book import PriceBook, Product, PriceTier


def _usable_at(moment: datetime):
    return (
        PriceBook.is_active == True,  # noqa: E712
        PriceBook.is_approved == True,  # noqa: E712
        PriceBook.effective_from <= moment,
        or_(PriceBook.effective_to.is_(None), PriceBook.effective_to >= moment),
    )


class SqlAlchemyPriceBookRepository(PriceBookRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, price_book_id: str) -> Optional[PriceBook]:
        result = await self.session.execute(select(PriceBook).where(PriceBook.id == price_book_id))
        return result.scalar_one_or_none()

    async def find_regional(
        self, pricing_peg: str, billing_currency: str, moment: datetime
    ) -> Optional[PriceBook]:
        stmt = (
            select(PriceBook)
            .where(
                PriceBook.pricing_peg == pricing_peg,
                PriceBook.billing_currency == billing_currency,
                PriceBook.company_id.is_(None),
                *_usable_at(moment),
            )
            .order_by(PriceBook.effective_from.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_global(self, moment: datetime) -> Optional[PriceBook]:
        stmt = (
            select(PriceBook)
            .where(PriceBook.is_global == True, *_usable_at(moment))  # noqa: E712
            .order_by(PriceBook.effective_from.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_product_by_code(self, code: str) -> Optional[Product]:
        result = await self.session.execute(select(Product).where(Product.code == code))
        return result.scalar_one_or_none()

    async def get_tiers(self, price_book_id: str, product_id: str) -> List[PriceTier]:
        stmt = select(PriceTier).where(
            PriceTier.price_book_id == price_book_id,
            PriceTier.product_id == product_id,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_tiers_with_products(
        self, price_book_id: str, code_prefix: str
    ) -> List[Tuple[PriceTier, Product]]:
        stmt = (
            select(PriceTier, Product)
            .join(Product, Product.id == PriceTier.product_id)
            .where(
                PriceTier.price_book_id == price_book_id,
                Product.code.startswith(code_prefix),
                Product.is_active == True,  # noqa: E712
            )
            .order_by(PriceTier.salary_band_min)
        )
        result = await self.session.execute(stmt)
        return [(tier, product) for tier, product in result.all()]
