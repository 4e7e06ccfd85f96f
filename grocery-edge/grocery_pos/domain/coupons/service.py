# grocery_pos/domain/coupons/service.py
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.errors import BusinessError, NotFoundError, ValidationError
from grocery_pos.core.money import to_decimal
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.models.coupons import Coupon
from grocery_pos.db.repositories.coupons import get_coupon_by_code, list_coupons
from grocery_pos.domain.cart.engine import CartEngine
from grocery_pos.domain.cart.schemas import DiscountedTotals
from .schemas import CouponCreate

logger = logging.getLogger(__name__)


def normalise_code(code: str) -> str:
    return (code or "").strip().upper()


async def create_coupon(
    db: AsyncSession,
    data: CouponCreate,
) -> Coupon:
    if await get_coupon_by_code(db, data.code) is not None:
        raise ValidationError(f"Coupon {data.code} already exists")

    coupon = Coupon(**data.model_dump())
    db.add(coupon)
    await db.commit()
    await db.refresh(coupon)
    logger.info("Coupon %s created (%s%%)", coupon.code, coupon.discount_percent)
    return coupon


async def get_coupon(
    db: AsyncSession,
    code: str,
) -> Coupon:
    coupon = await get_coupon_by_code(db, normalise_code(code))
    if coupon is None:
        raise NotFoundError(f"Coupon code {code} is not valid")
    return coupon


async def all_coupons(db: AsyncSession) -> List[Coupon]:
    return await list_coupons(db)


async def validate_coupon(
    db: AsyncSession,
    code: str,
    subtotal: Decimal,
    today: Optional[date] = None,
) -> Coupon:
    """Return the coupon if it can be used on an order of ``subtotal``."""
    coupon = await get_coupon(db, code)
    today = today or utcnow().date()

    if coupon.expiry_date is not None and coupon.expiry_date < today:
        raise BusinessError(f"Coupon {coupon.code} expired on {coupon.expiry_date.isoformat()}")
    if coupon.max_usage is not None and coupon.usage_count >= coupon.max_usage:
        raise BusinessError(f"Coupon {coupon.code} has been used {coupon.usage_count} of {coupon.max_usage} times")
    minimum = to_decimal(coupon.min_order_amount)
    if to_decimal(subtotal) < minimum:
        raise BusinessError(f"Coupon {coupon.code} needs a minimum order of {minimum:.2f}, subtotal is {subtotal:.2f}")
    return coupon


async def apply_coupon(
    db: AsyncSession,
    cart: CartEngine,
    code: str,
    today: Optional[date] = None,
) -> DiscountedTotals:
    coupon = await validate_coupon(db, code, cart.totals().subtotal, today)
    return cart.apply_discount(coupon.discount_percent, f"coupon: {coupon.code}")


async def redeem_coupon(
    db: AsyncSession,
    code: str,
) -> Coupon:
    coupon = await get_coupon(db, code)
    coupon.usage_count = (coupon.usage_count or 0) + 1
    await db.commit()
    await db.refresh(coupon)
    return coupon
