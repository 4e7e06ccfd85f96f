"""Tests for the inventory service."""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from grocery_pos.core.errors import InsufficientStockError, NotFoundError, ValidationError
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.models.stock_movements import MovementDirection
from grocery_pos.db.repositories.stock_movements import list_movements_for_product
from grocery_pos.domain.inventory import service
from grocery_pos.domain.inventory.schemas import PriceUpdate, ProductCreate, ProductUpdate, StockTakeItem


class TestCatalog:
    """Product records."""

    async def test_duplicate_barcode_rejected(self, session_factory, rice):
        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await service.add_product(db, ProductCreate(
                    name="Other rice", barcode=rice.barcode, price=Decimal("1.00"),
                ))

    async def test_products_without_barcode_coexist(self, session_factory):
        async with session_factory() as db:
            await service.add_product(db, ProductCreate(name="Loose tomatoes", price=Decimal("4.00")))
            await service.add_product(db, ProductCreate(name="Loose onions", price=Decimal("3.00")))
            assert len(await service.list_products(db)) == 2

    async def test_name_is_sanitised(self, session_factory):
        async with session_factory() as db:
            product = await service.add_product(db, ProductCreate(name="  <b>Dates</b> ", price=Decimal("12.00")))
        assert product.name == "bDates/b"

    async def test_update_product(self, session_factory, rice):
        async with session_factory() as db:
            updated = await service.update_product(db, rice.id, ProductUpdate(price=Decimal("27.00")))
        assert updated.price == Decimal("27.00")
        assert updated.name == rice.name

    async def test_update_to_taken_barcode(self, session_factory, rice, oil):
        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await service.update_product(db, oil.id, ProductUpdate(barcode=rice.barcode))

    async def test_deactivated_product_is_hidden(self, session_factory, rice):
        async with session_factory() as db:
            await service.deactivate_product(db, rice.id)
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await service.get_product(db, rice.id)
            assert await service.list_products(db) == []

    async def test_find_by_barcode(self, session_factory, rice):
        async with session_factory() as db:
            found = await service.find_by_barcode(db, "6281000000017")
            assert found.id == rice.id
            with pytest.raises(NotFoundError):
                await service.find_by_barcode(db, "0000000000000")

    async def test_list_by_category(self, session_factory, rice, oil):
        async with session_factory() as db:
            grains = await service.list_products(db, "grains")
        assert [p.id for p in grains] == [rice.id]

    async def test_low_stock(self, session_factory, rice, oil):
        """Rice uses its own minimum (3), oil falls back to the default (10)."""
        async with session_factory() as db:
            low = await service.low_stock_products(db)
        assert [p.id for p in low] == [oil.id]

    async def test_expiring_products(self, session_factory):
        today = date(2024, 5, 1)
        async with session_factory() as db:
            yoghurt = await service.add_product(db, ProductCreate(
                name="Yoghurt", price=Decimal("2.00"), expiry_date=today + timedelta(days=3),
            ))
            await service.add_product(db, ProductCreate(
                name="Canned beans", price=Decimal("2.00"), expiry_date=today + timedelta(days=300),
            ))
            expiring = await service.expiring_products(db, days_ahead=7, today=today)
        assert [p.id for p in expiring] == [yoghurt.id]


class TestBulkPrices:

    async def test_missing_product_does_not_stop_batch(self, session_factory, rice, oil):
        missing = uuid.uuid4()
        async with session_factory() as db:
            results = await service.bulk_update_prices(db, [
                PriceUpdate(product_id=rice.id, price=Decimal("27.00"), cost=Decimal("20.00")),
                PriceUpdate(product_id=missing, price=Decimal("1.00")),
                PriceUpdate(product_id=oil.id, price=Decimal("95.50")),
            ])

        assert [r.success for r in results] == [True, False, True]
        assert results[1].product_id == missing
        assert results[1].product is None
        assert str(missing) in results[1].error
        assert results[0].product.cost == Decimal("20.00")
        assert results[2].product.price == Decimal("95.50")

        async with session_factory() as db:
            assert (await service.get_product(db, rice.id)).price == Decimal("27.00")
            assert (await service.get_product(db, oil.id)).cost == Decimal("80.00")

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            PriceUpdate(product_id=uuid.uuid4(), price=Decimal("-1.00"))


class TestStockMovements:
    """Quantity changes and their audit trail."""

    async def test_add_stock(self, session_factory, rice):
        async with session_factory() as db:
            product = await service.add_stock(db, rice.id, 5, "delivery")
            movements = await list_movements_for_product(db, rice.id)

        assert product.quantity == 15
        assert len(movements) == 1
        assert movements[0].direction == MovementDirection.IN
        assert movements[0].previous_quantity == 10
        assert movements[0].new_quantity == 15
        assert movements[0].reason == "delivery"

    async def test_remove_more_than_on_hand(self, session_factory, rice):
        async with session_factory() as db:
            with pytest.raises(InsufficientStockError):
                await service.remove_stock(db, rice.id, 11)
            assert await list_movements_for_product(db, rice.id) == []

    async def test_remove_stock_unknown_product(self, session_factory):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await service.remove_stock(db, uuid.uuid4(), 1)

    async def test_non_positive_quantity(self, session_factory, rice):
        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await service.add_stock(db, rice.id, 0)

    async def test_stock_take(self, session_factory, rice, oil):
        missing = uuid.uuid4()
        async with session_factory() as db:
            results = await service.perform_stock_take(db, [
                StockTakeItem(product_id=rice.id, actual_quantity=7),
                StockTakeItem(product_id=oil.id, actual_quantity=5),
                StockTakeItem(product_id=missing, actual_quantity=1),
            ])
            rice_moves = await list_movements_for_product(db, rice.id)
            oil_moves = await list_movements_for_product(db, oil.id)

        assert [r.success for r in results] == [True, True, False]
        assert results[0].difference == -3
        assert results[1].difference == 0
        assert results[2].error is not None
        assert len(rice_moves) == 1
        assert rice_moves[0].direction == MovementDirection.OUT
        assert rice_moves[0].quantity == 3
        assert oil_moves == []

    async def test_movements_between(self, session_factory, rice):
        async with session_factory() as db:
            await service.add_stock(db, rice.id, 2)
            now = utcnow()
            movements = await service.stock_movements(db, now - timedelta(hours=1), now + timedelta(hours=1))
        assert len(movements) == 1


class TestValuation:

    async def test_inventory_value(self, session_factory, rice, oil):
        async with session_factory() as db:
            value = await service.inventory_value(db)
        assert value.total_cost_value == Decimal("590.00")
        assert value.total_retail_value == Decimal("755.00")
        assert value.total_items == 15
        assert value.products_count == 2

    async def test_best_sellers(self, runtime, session_factory, rice, oil):
        runtime.cart.add_item(rice, 3)
        runtime.cart.add_item(oil, 1)
        await runtime.checkout.checkout("cash", 500)
        runtime.cart.add_item(oil, 1)
        await runtime.checkout.checkout("cash", 500)

        now = utcnow()
        async with session_factory() as db:
            ranking = await service.best_selling_products(db, now - timedelta(hours=1), now + timedelta(hours=1))

        assert [(r.product_id, r.total_quantity) for r in ranking] == [(rice.id, 3), (oil.id, 2)]
        assert ranking[0].total_revenue == Decimal("76.50")
