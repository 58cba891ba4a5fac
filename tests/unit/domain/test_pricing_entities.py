"""Unit tests for price tiers, tier selection, money rounding and billing cycles"""

import pytest
from datetime import datetime
from decimal import Decimal

from src.app.services.price_book_selection import select_tier
from src.domain.money import to_money
from src.domain.price_book import PriceTier
from src.domain.subscription import BillingCycle, cycle_end


def tier(name, price, min_quantity=1, max_quantity=None, salary_min=None, salary_max=None):
    return PriceTier(
        price_book_id="book_1",
        product_id="product_1",
        name=name,
        min_quantity=min_quantity,
        max_quantity=max_quantity,
        salary_band_min=Decimal(str(salary_min)) if salary_min is not None else None,
        salary_band_max=Decimal(str(salary_max)) if salary_max is not None else None,
        unit_price=Decimal(str(price)),
    )


class TestSelectTier:

    def test_highest_matching_min_quantity_wins(self):
        tiers = [tier("1+", "100.00"), tier("10+", "90.00", min_quantity=10), tier("50+", "80.00", min_quantity=50)]

        assert select_tier(tiers, quantity=1).name == "1+"
        assert select_tier(tiers, quantity=12).name == "10+"
        assert select_tier(tiers, quantity=500).name == "50+"

    def test_quantity_outside_every_range(self):
        tiers = [tier("1-5", "100.00", max_quantity=5)]

        assert select_tier(tiers, quantity=6) is None

    def test_salary_band_selection(self):
        tiers = [
            tier("Band 1", "9950.00", salary_min=100000, salary_max=149999.99),
            tier("Band 2", "14950.00", salary_min=150000, salary_max=249999.99),
            tier("Band 3", "24950.00", salary_min=250000),
        ]

        assert select_tier(tiers, salary=Decimal("120000")).name == "Band 1"
        assert select_tier(tiers, salary=Decimal("150000")).name == "Band 2"
        assert select_tier(tiers, salary=Decimal("1000000")).name == "Band 3"

    def test_salary_below_every_band(self):
        tiers = [tier("Band 1", "9950.00", salary_min=100000)]

        assert select_tier(tiers, salary=Decimal("50000")) is None

    def test_no_tiers(self):
        assert select_tier([], quantity=1) is None


class TestToMoney:

    @pytest.mark.parametrize(
        "value,expected",
        [("1.005", "1.01"), ("1.004", "1.00"), (398, "398.00"), ("0.125", "0.13")],
    )
    def test_rounds_half_up_to_cents(self, value, expected):
        assert to_money(value) == Decimal(expected)


class TestCycleEnd:

    def test_monthly_clamps_to_month_end(self):
        assert cycle_end(datetime(2026, 1, 31), BillingCycle.MONTHLY) == datetime(2026, 2, 28)

    def test_annual(self):
        assert cycle_end(datetime(2026, 3, 15), BillingCycle.ANNUAL) == datetime(2027, 3, 15)
