from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from grocery_pos.db.models.sales import Sale, SyncStatus


async def get_sale_by_id(
    db: AsyncSession,
    sale_id: UUID,
) -> Optional[Sale]:
    return await db.get(Sale, sale_id)


async def list_sales_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
) -> List[Sale]:
    result = await db.execute(
        select(Sale)
        .where(Sale.created_at >= start, Sale.created_at <= end)
        .order_by(Sale.created_at.desc())
    )
    return list(result.scalars().all())


async def list_sales_for_customer(
    db: AsyncSession,
    customer_id: UUID,
) -> List[Sale]:
    result = await db.execute(
        select(Sale).where(Sale.customer_id == customer_id).order_by(Sale.created_at)
    )
    return list(result.scalars().all())


async def set_sync_status(
    db: AsyncSession,
    sale_id: UUID,
    status: SyncStatus,
) -> Optional[Sale]:
    sale = await get_sale_by_id(db, sale_id)
    if sale is None:
        return None
    sale.sync_status = status
    await db.commit()
    return sale
