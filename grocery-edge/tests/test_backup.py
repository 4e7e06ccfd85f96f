"""Tests for exporting and importing the store."""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from grocery_pos.core.errors import ValidationError
from grocery_pos.db.models.customers import Customer
from grocery_pos.db.models.products import Product
from grocery_pos.db.models.sales import Sale
from grocery_pos.db.models.stock_movements import StockMovement
from grocery_pos.domain.backup.schemas import BackupData
from grocery_pos.domain.backup.service import export_data, import_data
from grocery_pos.domain.coupons.schemas import CouponCreate
from grocery_pos.domain.coupons.service import create_coupon, get_coupon
from grocery_pos.domain.inventory.schemas import ProductCreate, ProductUpdate
from grocery_pos.domain.inventory.service import add_product, update_product


async def count(session_factory, model) -> int:
    async with session_factory() as db:
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.fixture
async def store(runtime, session_factory, rice, oil, customer):
    """One sale of two bags of rice to a known customer, plus a coupon."""
    async with session_factory() as db:
        await create_coupon(db, CouponCreate(code="WELCOME", discount_percent=Decimal("5"), max_usage=3))
    runtime.cart.add_item(rice, 2)
    return await runtime.checkout.checkout("cash", 60, customer_id=customer.id)


async def test_export_contents(session_factory, store, rice):
    async with session_factory() as db:
        data = await export_data(db)

    assert {p.name for p in data.products} == {"Basmati Rice 5kg", "Sunflower Oil 1.8L"}
    assert [c.phone for c in data.customers] == ["0500000001"]
    assert [s.receipt_number for s in data.sales] == [store.receipt_number]
    assert data.sales[0].items[0].product_id == rice.id
    assert len(data.stock_movements) == 1
    assert [c.code for c in data.coupons] == ["WELCOME"]
    assert data.version == 1


async def test_import_replaces_store(session_factory, store, rice):
    async with session_factory() as db:
        exported = await export_data(db)
    payload = exported.model_dump_json()

    async with session_factory() as db:
        await add_product(db, ProductCreate(name="Dates 1kg", price=Decimal("30.00")))
        await update_product(db, rice.id, ProductUpdate(price=Decimal("99.00")))

    async with session_factory() as db:
        summary = await import_data(db, BackupData.model_validate_json(payload))

    assert summary.products == 2
    assert summary.sales == 1
    assert summary.coupons == 1
    assert await count(session_factory, Product) == 2
    assert await count(session_factory, Customer) == 1
    assert await count(session_factory, StockMovement) == 1
    async with session_factory() as db:
        restored_rice = await db.get(Product, rice.id)
        sale = await db.get(Sale, store.id)
        coupon = await get_coupon(db, "WELCOME")
    assert restored_rice.price == Decimal("25.50")
    assert restored_rice.quantity == 8
    assert sale.total == Decimal("58.65")
    assert sale.items[0]["name"] == "Basmati Rice 5kg"
    assert coupon.max_usage == 3


async def test_unknown_version_rejected(session_factory, store):
    async with session_factory() as db:
        data = await export_data(db)
        data.version = 2
        with pytest.raises(ValidationError):
            await import_data(db, data)

    assert await count(session_factory, Sale) == 1


async def test_rejected_record_leaves_store_unchanged(session_factory, store, oil):
    async with session_factory() as db:
        data = await export_data(db)
    clash = data.products[0].model_copy(update={"id": uuid.uuid4()})
    data.products.append(clash)

    async with session_factory() as db:
        with pytest.raises(ValidationError, match="could not be imported"):
            await import_data(db, data)

    assert await count(session_factory, Product) == 2
    assert await count(session_factory, Sale) == 1
    async with session_factory() as db:
        assert (await db.get(Product, oil.id)).price == Decimal("100.00")
