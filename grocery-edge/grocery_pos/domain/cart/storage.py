# grocery_pos/domain/cart/storage.py
import logging
from typing import Optional
from uuid import UUID

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.errors import EmptyCartError
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.repositories.local_storage import delete_item, get_item, set_item
from .engine import CartEngine
from .schemas import SavedCart

logger = logging.getLogger(__name__)

SAVED_CART_KEY = "savedCart"


async def save_cart(
    db: AsyncSession,
    cart: CartEngine,
    customer_id: Optional[UUID] = None,
) -> SavedCart:
    """Park the current cart in local storage, replacing any earlier one.

    The cart itself is left as it is.
    """
    if cart.is_empty():
        raise EmptyCartError("Nothing to save, the cart is empty")

    saved = SavedCart(items=cart.snapshot(), customer_id=customer_id, saved_at=utcnow())
    await set_item(db, SAVED_CART_KEY, saved.model_dump_json())
    logger.info("Cart with %d lines saved", len(saved.items))
    return saved


async def restore_cart(
    db: AsyncSession,
    cart: CartEngine,
) -> Optional[SavedCart]:
    """Load the parked cart into ``cart`` and forget it.

    Returns None when nothing is parked. Stock is not re-checked here;
    checkout does that against the store.
    """
    raw = await get_item(db, SAVED_CART_KEY)
    if raw is None:
        return None

    try:
        saved = SavedCart.model_validate_json(raw)
    except pydantic.ValidationError:
        logger.exception("Saved cart is unreadable, discarding it")
        await delete_item(db, SAVED_CART_KEY)
        return None

    cart.restore(saved.items)
    await delete_item(db, SAVED_CART_KEY)
    logger.info("Cart with %d lines restored", len(saved.items))
    return saved
