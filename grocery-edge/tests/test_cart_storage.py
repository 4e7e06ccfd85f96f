"""Tests for parking and restoring the cart."""

from decimal import Decimal

import pytest

from grocery_pos.core.errors import EmptyCartError
from grocery_pos.db.repositories.local_storage import get_item, set_item
from grocery_pos.domain.cart.engine import CartEngine
from grocery_pos.domain.cart.storage import SAVED_CART_KEY, restore_cart, save_cart


async def test_save_and_restore(session_factory, rice, oil, customer):
    cart = CartEngine()
    cart.add_item(rice, 2)
    cart.add_item(oil, 1)

    async with session_factory() as db:
        saved = await save_cart(db, cart, customer_id=customer.id)
    assert len(cart) == 2

    other = CartEngine()
    async with session_factory() as db:
        restored = await restore_cart(db, other)
        assert await get_item(db, SAVED_CART_KEY) is None

    assert restored.customer_id == customer.id
    assert restored.saved_at == saved.saved_at
    assert [line.product_id for line in other.lines()] == [rice.id, oil.id]
    assert other.totals().subtotal == Decimal("151.00")


async def test_restore_replaces_current_lines(session_factory, rice, oil):
    cart = CartEngine()
    cart.add_item(rice, 1)
    async with session_factory() as db:
        await save_cart(db, cart)

    cart.clear()
    cart.add_item(oil, 3)
    async with session_factory() as db:
        await restore_cart(db, cart)

    assert [(line.product_id, line.quantity) for line in cart.lines()] == [(rice.id, 1)]


async def test_nothing_saved(session_factory):
    cart = CartEngine()
    async with session_factory() as db:
        assert await restore_cart(db, cart) is None
    assert cart.is_empty()


async def test_empty_cart_not_saved(session_factory):
    async with session_factory() as db:
        with pytest.raises(EmptyCartError):
            await save_cart(db, CartEngine())
        assert await get_item(db, SAVED_CART_KEY) is None


async def test_unreadable_saved_cart_is_discarded(session_factory, rice):
    cart = CartEngine()
    cart.add_item(rice, 1)
    async with session_factory() as db:
        await set_item(db, SAVED_CART_KEY, '{"items": "not a list"}')
        assert await restore_cart(db, cart) is None
        assert await get_item(db, SAVED_CART_KEY) is None

    assert len(cart) == 1
