"""Tests for customers and loyalty points."""

import uuid
from decimal import Decimal

import pytest

from grocery_pos.core.errors import NotFoundError, ValidationError
from grocery_pos.domain.customers import service
from grocery_pos.domain.customers.schemas import CustomerCreate


@pytest.mark.parametrize("amount,points", [
    ("9.99", 0),
    ("58.65", 5),
    ("99.99", 9),
    ("100.00", 20),
    ("230.00", 43),
    ("499.99", 69),
    ("500.00", 100),
])
def test_points_for_purchase(amount, points):
    assert service.points_for_purchase(Decimal(amount)) == points


class TestCustomers:

    async def test_duplicate_phone(self, session_factory, customer):
        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await service.create_customer(db, CustomerCreate(name="Someone else", phone=customer.phone))

    async def test_find_by_phone(self, session_factory, customer):
        async with session_factory() as db:
            found = await service.find_by_phone(db, "0500000001")
        assert found.id == customer.id

    async def test_unknown_customer(self, session_factory):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await service.get_customer(db, uuid.uuid4())

    async def test_record_purchase_accumulates(self, session_factory, customer):
        async with session_factory() as db:
            first = await service.record_purchase(db, customer.id, Decimal("120.00"))
            second = await service.record_purchase(db, customer.id, Decimal("30.50"))
            stored = await service.get_customer(db, customer.id)

        assert first.points_earned == 22
        assert second.points_earned == 3
        assert second.total_points == 25
        assert stored.purchase_count == 2
        assert stored.total_purchases == Decimal("150.50")

    async def test_purchase_history(self, runtime, session_factory, rice, customer):
        runtime.cart.add_item(rice, 1)
        first = await runtime.checkout.checkout("cash", 30, customer_id=customer.id)
        runtime.cart.add_item(rice, 1)
        await runtime.checkout.checkout("cash", 30)

        async with session_factory() as db:
            history = await service.purchase_history(db, customer.id)

        assert [sale.id for sale in history] == [first.id]

    async def test_purchase_history_unknown_customer(self, session_factory):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await service.purchase_history(db, uuid.uuid4())
