"""Country Pricing Map Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.country_pricing_map import CountryPricingMap


class CountryPricingMapRepository(ABC):

    @abstractmethod
    async def get_by_code(self, country_code: str) -> Optional[CountryPricingMap]:
        pass

    @abstractmethod
    async def get_by_name(self, country_name: str) -> Optional[CountryPricingMap]:
        """Case-insensitive lookup on country_name"""
        pass
