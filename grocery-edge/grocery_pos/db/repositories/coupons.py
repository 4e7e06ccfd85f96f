from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from grocery_pos.db.models.coupons import Coupon


async def get_coupon_by_code(
    db: AsyncSession,
    code: str,
) -> Optional[Coupon]:
    result = await db.execute(
        select(Coupon).where(Coupon.code == code)
    )
    return result.scalar_one_or_none()


async def list_coupons(db: AsyncSession) -> List[Coupon]:
    result = await db.execute(select(Coupon).order_by(Coupon.code))
    return list(result.scalars().all())
