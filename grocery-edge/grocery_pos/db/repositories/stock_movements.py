from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from grocery_pos.db.models.stock_movements import StockMovement


async def list_movements_for_product(
    db: AsyncSession,
    product_id: UUID,
) -> List[StockMovement]:
    result = await db.execute(
        select(StockMovement)
        .where(StockMovement.product_id == product_id)
        .order_by(StockMovement.created_at)
    )
    return list(result.scalars().all())


async def list_movements_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
) -> List[StockMovement]:
    result = await db.execute(
        select(StockMovement)
        .where(StockMovement.created_at >= start, StockMovement.created_at <= end)
        .order_by(StockMovement.created_at)
    )
    return list(result.scalars().all())
