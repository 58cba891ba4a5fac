"""Integration tests for the HTTP API over a real database"""

import pytest
from decimal import Decimal


@pytest.mark.asyncio
class TestWalletAPI:

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_topup_then_balance(self, client):
        """
        Given: A consultant with no wallet yet
        When: 250.00 is topped up and the balance is read
        Then: The wallet exists with the new balance in the default currency
        """
        # Act
        topup = await client.post("/api/wallet/accounts/CONSULTANT/consultant_9/topup", json={"amount": "250.00"})
        balance = await client.get("/api/wallet/accounts/CONSULTANT/consultant_9/balance")

        # Assert
        assert topup.status_code == 201
        assert topup.json()["type"] == "WALLET_TOPUP"
        assert Decimal(topup.json()["balance_after"]) == Decimal("250.00")

        assert balance.status_code == 200
        data = balance.json()
        assert Decimal(data["balance"]) == Decimal("250.00")
        assert Decimal(data["total_credits"]) == Decimal("250.00")
        assert data["currency"] == "USD"

    async def test_balance_of_new_owner_is_zero(self, client):
        response = await client.get("/api/wallet/accounts/COMPANY/brand_new/balance")

        assert response.status_code == 200
        assert Decimal(response.json()["balance"]) == Decimal("0")

    async def test_invalid_amount_is_422(self, client):
        response = await client.post("/api/wallet/accounts/CONSULTANT/consultant_9/topup", json={"amount": "-5"})

        assert response.status_code == 422

    async def test_withdrawal_above_balance_renders_error_body(self, client):
        """
        Given: A consultant holding 100.00
        When: 160.00 is withdrawn
        Then: 400 with the INSUFFICIENT_BALANCE error body and the shortfall
        """
        # Arrange
        await client.post("/api/wallet/accounts/CONSULTANT/consultant_9/topup", json={"amount": "100.00"})

        # Act
        response = await client.post(
            "/api/wallet/withdrawals",
            json={"owner_id": "consultant_9", "amount": "160.00", "payment_method": "BANK_TRANSFER"},
        )

        # Assert
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INSUFFICIENT_BALANCE"
        assert Decimal(error["shortfall"]) == Decimal("60.00")

    async def test_adjustment_of_unknown_wallet_is_404(self, client):
        response = await client.post(
            "/api/wallet/accounts/CONSULTANT/nobody/adjustments",
            json={"amount": "10.00", "direction": "CREDIT", "reason": "Goodwill", "admin_id": "admin_1"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ACCOUNT_NOT_FOUND"

    async def test_company_topup_in_other_currency_after_lock(self, client, company):
        """
        Given: A company locked to AUD by its first top-up
        When: A second top-up arrives in USD
        Then: The credit is accepted and the lock stays on AUD
        """
        # Arrange
        first = await client.post(
            "/api/wallet/accounts/COMPANY/company_au/topup", json={"amount": "1000.00", "currency": "AUD"}
        )

        # Act
        second = await client.post(
            "/api/wallet/accounts/COMPANY/company_au/topup", json={"amount": "1000.00", "currency": "USD"}
        )

        # Assert
        assert first.status_code == 201
        assert second.status_code == 201
        assert Decimal(second.json()["balance_after"]) == Decimal("2000.00")

        currencies = await client.get("/api/pricing/companies/company_au/currencies")
        assert currencies.json()["is_locked"] is True
        assert currencies.json()["billing_currency"] == "AUD"

    async def test_addon_purchase_debits_company_wallet(self, client, company):
        # Arrange
        await client.post("/api/wallet/accounts/COMPANY/company_au/topup", json={"amount": "500.00", "currency": "AUD"})

        # Act
        response = await client.post(
            "/api/wallet/addons",
            json={"owner_id": "company_au", "addon_name": "FEATURED_LISTING", "amount": "120.00", "quantity": 2},
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["type"] == "ADDON_SERVICE_CHARGE"
        assert Decimal(response.json()["balance_after"]) == Decimal("380.00")

    async def test_stats_include_pending_withdrawals(self, client):
        """
        Given: Two consultant wallets, one with a pending 40.00 payout
        When: The stats are read
        Then: Balances are summed per owner type and the payout is counted
        """
        # Arrange
        await client.post("/api/wallet/accounts/CONSULTANT/consultant_8/topup", json={"amount": "100.00"})
        await client.post("/api/wallet/accounts/CONSULTANT/consultant_9/topup", json={"amount": "50.00"})
        await client.post(
            "/api/wallet/withdrawals",
            json={"owner_id": "consultant_8", "amount": "40.00", "payment_method": "BANK_TRANSFER"},
        )

        # Act
        response = await client.get("/api/wallet/stats")

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["total_accounts"] == 2
        assert Decimal(data["total_balance"]) == Decimal("110.00")
        assert data["by_owner_type"]["CONSULTANT"]["count"] == 2
        assert data["pending_withdrawals"] == 1
        assert Decimal(data["pending_withdrawal_amount"]) == Decimal("40.00")


@pytest.mark.asyncio
class TestPricingAPI:

    async def test_job_price_uses_regional_book(self, client, company):
        response = await client.get(
            "/api/pricing/companies/company_au/job-price", params={"service_package": "shortlisting"}
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["price"]) == Decimal("1990.00")
        assert data["currency"] == "AUD"
        assert data["product_code"] == "RECRUIT_SHORTLISTING"

    async def test_executive_search_priced_by_band(self, client, company):
        response = await client.get(
            "/api/pricing/companies/company_au/job-price",
            params={"service_package": "executive-search", "salary_max": "260000"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_executive_search"] is True
        assert data["band"] == "BAND_2"
        assert Decimal(data["price"]) == Decimal("14900.00")

    async def test_missing_product_is_404(self, client, company):
        response = await client.get("/api/pricing/companies/company_au/products/NOPE/price")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    async def test_company_without_price_book_is_500(self, client, db_session):
        from src.domain.company import Company

        db_session.add(Company(id="company_nz", name="Kiwi Hire", pricing_peg="NZD", billing_currency="NZD"))
        await db_session.commit()

        response = await client.get("/api/pricing/companies/company_nz/price-book")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "NO_PRICE_BOOK"
