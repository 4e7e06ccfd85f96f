# grocery_pos/domain/customers/service.py
import logging
import math
from decimal import Decimal
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.errors import NotFoundError, ValidationError
from grocery_pos.core.money import round2, to_decimal
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.models.customers import Customer
from grocery_pos.db.models.sales import Sale
from grocery_pos.db.repositories.customers import (
    get_customer_by_id,
    get_customer_by_phone,
    list_customers,
)
from grocery_pos.db.repositories.sales import list_sales_for_customer
from .schemas import CustomerCreate, LoyaltyUpdate

logger = logging.getLogger(__name__)

# (minimum purchase, bonus points), checked from the top
BONUS_TIERS = (
    (Decimal("500"), 50),
    (Decimal("200"), 20),
    (Decimal("100"), 10),
)


def bonus_points(amount: Decimal) -> int:
    for threshold, bonus in BONUS_TIERS:
        if amount >= threshold:
            return bonus
    return 0


def points_for_purchase(amount: Decimal) -> int:
    """One point per 10 currency units spent plus the tier bonus."""
    amount = to_decimal(amount)
    return math.floor(amount / 10) + bonus_points(amount)


async def create_customer(
    db: AsyncSession,
    data: CustomerCreate,
) -> Customer:
    if await get_customer_by_phone(db, data.phone) is not None:
        raise ValidationError(f"A customer with phone {data.phone} already exists")

    customer = Customer(**data.model_dump())
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return customer


async def get_customer(
    db: AsyncSession,
    customer_id: UUID,
) -> Customer:
    customer = await get_customer_by_id(db, customer_id)
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} not found")
    return customer


async def find_by_phone(
    db: AsyncSession,
    phone: str,
) -> Customer:
    customer = await get_customer_by_phone(db, phone)
    if customer is None:
        raise NotFoundError(f"No customer with phone {phone}")
    return customer


async def all_customers(db: AsyncSession) -> List[Customer]:
    return await list_customers(db)


async def record_purchase(
    db: AsyncSession,
    customer_id: UUID,
    amount: Decimal,
) -> LoyaltyUpdate:
    customer = await get_customer(db, customer_id)

    earned = points_for_purchase(amount)
    customer.loyalty_points = (customer.loyalty_points or 0) + earned
    customer.total_purchases = round2(to_decimal(customer.total_purchases or 0) + to_decimal(amount))
    customer.purchase_count = (customer.purchase_count or 0) + 1
    customer.last_purchase_at = utcnow()

    await db.commit()
    logger.debug("Customer %s earned %s points", customer.id, earned)
    return LoyaltyUpdate(points_earned=earned, total_points=customer.loyalty_points)


async def purchase_history(
    db: AsyncSession,
    customer_id: UUID,
) -> List[Sale]:
    await get_customer(db, customer_id)
    return await list_sales_for_customer(db, customer_id)
