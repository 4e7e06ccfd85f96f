from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from grocery_pos.db.models.products import Product


async def get_product_by_id(
    db: AsyncSession,
    product_id: UUID,
    include_inactive: bool = False,
) -> Optional[Product]:
    product = await db.get(Product, product_id)
    if product is not None and not product.active and not include_inactive:
        return None
    return product


async def get_product_by_barcode(
    db: AsyncSession,
    barcode: str,
) -> Optional[Product]:
    result = await db.execute(
        select(Product).where(Product.barcode == barcode)
    )
    return result.scalar_one_or_none()


async def list_products(
    db: AsyncSession,
    category: Optional[str] = None,
) -> List[Product]:
    query = select(Product).where(Product.active.is_(True))
    if category is not None:
        query = query.where(Product.category == category)
    result = await db.execute(query.order_by(Product.name))
    return list(result.scalars().all())
