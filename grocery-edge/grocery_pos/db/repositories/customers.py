from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from grocery_pos.db.models.customers import Customer


async def get_customer_by_id(
    db: AsyncSession,
    customer_id: UUID,
) -> Optional[Customer]:
    return await db.get(Customer, customer_id)


async def get_customer_by_phone(
    db: AsyncSession,
    phone: str,
) -> Optional[Customer]:
    result = await db.execute(
        select(Customer).where(Customer.phone == phone)
    )
    return result.scalar_one_or_none()


async def list_customers(db: AsyncSession) -> List[Customer]:
    result = await db.execute(select(Customer).order_by(Customer.name))
    return list(result.scalars().all())
