"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest

from grocery_pos.core.config import Settings
from grocery_pos.db.base import build_engine, build_session_factory, create_tables
from grocery_pos.db.models.products import Product
from grocery_pos.domain.customers.schemas import CustomerCreate
from grocery_pos.domain.customers.service import create_customer
from grocery_pos.domain.inventory.schemas import ProductCreate
from grocery_pos.domain.inventory.service import add_product
from grocery_pos.domain.sync.remote import SimulatedSyncBackend
from grocery_pos.runtime import PosRuntime

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an offline terminal that retries without waiting."""
    return Settings(
        DB_URL=TEST_DATABASE_URL,
        SYNC_API_URL=None,
        SYNC_RETRY_DELAY_SECONDS=0,
        START_ONLINE=False,
    )


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def backend() -> SimulatedSyncBackend:
    return SimulatedSyncBackend()


@pytest.fixture
async def runtime(test_settings, db_engine, backend):
    """A fully wired terminal, starting offline."""
    pos = PosRuntime(config=test_settings, engine=db_engine, backend=backend)
    await pos.initialize()
    yield pos
    await pos.shutdown()


@pytest.fixture
async def rice(session_factory) -> Product:
    """A product priced 25.50 with 10 units on hand."""
    async with session_factory() as db:
        return await add_product(db, ProductCreate(
            name="Basmati Rice 5kg",
            barcode="6281000000017",
            category="grains",
            price=Decimal("25.50"),
            cost=Decimal("19.00"),
            quantity=10,
            min_stock=3,
        ))


@pytest.fixture
async def oil(session_factory) -> Product:
    async with session_factory() as db:
        return await add_product(db, ProductCreate(
            name="Sunflower Oil 1.8L",
            barcode="6281000000024",
            category="oils",
            price=Decimal("100.00"),
            cost=Decimal("80.00"),
            quantity=5,
        ))


@pytest.fixture
async def customer(session_factory):
    async with session_factory() as db:
        return await create_customer(db, CustomerCreate(name="Amal Saleh", phone="0500000001"))
