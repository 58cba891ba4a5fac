"""SQLAlchemy Country Pricing Map Repository Implementation"""

from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.country_pricing_map_repository import CountryPricingMapRepository
from src.domain.country_pricing_map import CountryPricingMap


class SqlAlchemyCountryPricingMapRepository(CountryPricingMapRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, country_code: str) -> Optional[CountryPricingMap]:
        stmt = select(CountryPricingMap).where(CountryPricingMap.country_code == country_code.upper())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, country_name: str) -> Optional[CountryPricingMap]:
        stmt = select(CountryPricingMap).where(
            func.lower(CountryPricingMap.country_name) == country_name.strip().lower()
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
