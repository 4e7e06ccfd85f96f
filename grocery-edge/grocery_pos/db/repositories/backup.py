from typing import Any, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import delete, select


async def list_all(db: AsyncSession, model: Any) -> List[Any]:
    result = await db.execute(select(model).order_by(model.created_at))
    return list(result.scalars().all())


async def delete_all(db: AsyncSession, model: Any) -> None:
    # caller commits, so a failed import leaves the old rows in place
    await db.execute(delete(model))
