import os
from datetime import datetime
from decimal import Decimal
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel
from src.depends import build_engine, build_session_factory, get_session
from src.domain.company import Company
from src.domain.consultant import Consultant
from src.domain.country_pricing_map import CountryPricingMap
from src.domain.job import Job
from src.domain.price_book import PriceBook, PriceTier, Product, ProductCategory


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a file-backed SQLite engine so that separate sessions really contend"""
    test_db_url = os.environ.get("TEST_DB_URI", f"sqlite+aiosqlite:///{tmp_path}/wallet_test.db")

    engine = build_engine(test_db_url)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client; every request gets its own session"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def pricing_setup(db_session):
    """
    AUD regional price book with the standard recruitment products and two
    executive-search bands, plus the AU country mapping
    """
    book = PriceBook(
        id="book_aud",
        name="Australia 2026",
        pricing_peg="AUD",
        billing_currency="AUD",
        currency="AUD",
        version="2026-Q1",
        effective_from=datetime(2025, 1, 1),
        is_active=True,
        is_approved=True,
    )
    shortlisting = Product(
        id="prod_short", code="RECRUIT_SHORTLISTING", name="Shortlisting", category=ProductCategory.JOB_POSTING
    )
    full_service = Product(
        id="prod_full", code="RECRUIT_FULL", name="Full service", category=ProductCategory.JOB_POSTING
    )
    band_1 = Product(
        id="prod_exec_1", code="RECRUIT_EXEC_BAND_1", name="Executive band 1", category=ProductCategory.JOB_POSTING
    )
    band_2 = Product(
        id="prod_exec_2", code="RECRUIT_EXEC_BAND_2", name="Executive band 2", category=ProductCategory.JOB_POSTING
    )

    db_session.add_all([
        CountryPricingMap(country_code="AU", country_name="Australia", pricing_peg="AUD", billing_currency="AUD"),
        book,
        shortlisting,
        full_service,
        band_1,
        band_2,
    ])
    await db_session.flush()

    db_session.add_all([
        PriceTier(price_book_id=book.id, product_id=shortlisting.id, name="Standard", unit_price=Decimal("1990.00")),
        PriceTier(price_book_id=book.id, product_id=full_service.id, name="Standard", unit_price=Decimal("4990.00")),
        PriceTier(
            price_book_id=book.id,
            product_id=band_1.id,
            name="Band 1",
            band_name="BAND_1",
            salary_band_min=Decimal("150000"),
            salary_band_max=Decimal("249999.99"),
            unit_price=Decimal("9900.00"),
        ),
        PriceTier(
            price_book_id=book.id,
            product_id=band_2.id,
            name="Band 2",
            band_name="BAND_2",
            salary_band_min=Decimal("250000"),
            unit_price=Decimal("14900.00"),
        ),
    ])
    await db_session.commit()
    return book


@pytest_asyncio.fixture
async def company(db_session, pricing_setup):
    company = Company(
        id="company_au",
        name="Harbour Recruiting",
        country="AU",
        pricing_peg="AUD",
        billing_currency="AUD",
        sales_agent_id="consultant_1",
    )
    db_session.add(company)
    await db_session.commit()
    return company


@pytest_asyncio.fixture
async def consultant(db_session):
    consultant = Consultant(
        id="consultant_1",
        region_id="region_apac",
        first_name="Mia",
        last_name="Chen",
        email="mia.chen@example.com",
        default_commission_rate=Decimal("0.1500"),
    )
    db_session.add(consultant)
    await db_session.commit()
    return consultant


@pytest_asyncio.fixture
async def shortlisting_job(db_session, company):
    job = Job(id="job_1", company_id=company.id, title="Senior Data Engineer", service_package="shortlisting")
    db_session.add(job)
    await db_session.commit()
    return job
