# grocery_pos/domain/inventory/service.py
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.config import settings
from grocery_pos.core.errors import InsufficientStockError, NotFoundError, ValidationError
from grocery_pos.core.money import round2, to_decimal
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.models.products import Product
from grocery_pos.db.models.stock_movements import MovementDirection, StockMovement
from grocery_pos.db.repositories.products import get_product_by_barcode, get_product_by_id, list_products
from grocery_pos.db.repositories.sales import list_sales_between
from grocery_pos.db.repositories.stock_movements import list_movements_between
from .schemas import (
    BestSeller,
    InventoryValue,
    PriceUpdate,
    PriceUpdateResult,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    StockTakeItem,
    StockTakeResult,
)

logger = logging.getLogger(__name__)

STOCK_TAKE_REASON = "stock take"


async def add_product(
    db: AsyncSession,
    data: ProductCreate,
) -> Product:
    if data.barcode and await get_product_by_barcode(db, data.barcode) is not None:
        raise ValidationError(f"A product with barcode {data.barcode} already exists")

    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Product %s added (%s)", product.name, product.id)
    return product


async def get_product(
    db: AsyncSession,
    product_id: UUID,
) -> Product:
    product = await get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


async def find_by_barcode(db: AsyncSession, barcode: str) -> Product:
    product = await get_product_by_barcode(db, barcode)
    if product is None or not product.active:
        raise NotFoundError(f"No product with barcode {barcode}")
    return product


async def update_product(
    db: AsyncSession,
    product_id: UUID,
    data: ProductUpdate,
) -> Product:
    product = await get_product(db, product_id)

    changes = data.model_dump(exclude_unset=True)
    barcode = changes.get("barcode")
    if barcode and barcode != product.barcode:
        existing = await get_product_by_barcode(db, barcode)
        if existing is not None and existing.id != product.id:
            raise ValidationError(f"A product with barcode {barcode} already exists")

    for field, value in changes.items():
        setattr(product, field, value)

    await db.commit()
    await db.refresh(product)
    return product


async def bulk_update_prices(
    db: AsyncSession,
    updates: Iterable[PriceUpdate],
) -> List[PriceUpdateResult]:
    """Apply new prices product by product, reporting each outcome.

    A missing product does not stop the rest of the batch. The cost is only
    changed when the update carries one.
    """
    results: List[PriceUpdateResult] = []

    for update in updates:
        changes = ProductUpdate(**update.model_dump(exclude={"product_id"}, exclude_none=True))
        try:
            product = await update_product(db, update.product_id, changes)
        except NotFoundError as exc:
            results.append(PriceUpdateResult(product_id=update.product_id, success=False, error=exc.message))
            continue
        results.append(PriceUpdateResult(
            product_id=product.id,
            success=True,
            product=ProductOut.model_validate(product),
        ))

    logger.info("Bulk price update: %d of %d applied", sum(r.success for r in results), len(results))
    return results


async def deactivate_product(
    db: AsyncSession,
    product_id: UUID,
) -> Product:
    # sales keep pointing at the row, so it is hidden rather than deleted
    product = await get_product(db, product_id)
    product.active = False
    await db.commit()
    await db.refresh(product)
    logger.info("Product %s deactivated", product.id)
    return product


async def low_stock_products(db: AsyncSession) -> List[Product]:
    products = await list_products(db)
    return [
        p for p in products
        if p.quantity <= (p.min_stock if p.min_stock is not None else settings.LOW_STOCK_THRESHOLD)
    ]


async def expiring_products(
    db: AsyncSession,
    days_ahead: int = 7,
    today: Optional[date] = None,
) -> List[Product]:
    target = (today or utcnow().date()) + timedelta(days=days_ahead)
    products = await list_products(db)
    return [p for p in products if p.expiry_date is not None and p.expiry_date <= target]


def _record_movement(
    db: AsyncSession,
    product: Product,
    direction: MovementDirection,
    quantity: int,
    reason: str,
    previous_quantity: int,
) -> StockMovement:
    movement = StockMovement(
        product_id=product.id,
        direction=direction,
        quantity=quantity,
        reason=reason,
        previous_quantity=previous_quantity,
        new_quantity=product.quantity,
    )
    db.add(movement)
    return movement


async def add_stock(
    db: AsyncSession,
    product_id: UUID,
    quantity: int,
    reason: str = "restock",
) -> Product:
    if quantity <= 0:
        raise ValidationError(f"Stock quantity must be positive, got {quantity}")

    product = await get_product(db, product_id)
    previous = product.quantity
    product.quantity = previous + quantity
    product.updated_at = utcnow()
    _record_movement(db, product, MovementDirection.IN, quantity, reason, previous)

    await db.commit()
    await db.refresh(product)
    return product


async def remove_stock(
    db: AsyncSession,
    product_id: UUID,
    quantity: int,
    reason: str = "sale",
) -> Product:
    if quantity <= 0:
        raise ValidationError(f"Stock quantity must be positive, got {quantity}")

    product = await get_product(db, product_id)
    if product.quantity < quantity:
        raise InsufficientStockError(product.name, quantity, product.quantity)

    previous = product.quantity
    product.quantity = previous - quantity
    product.updated_at = utcnow()
    _record_movement(db, product, MovementDirection.OUT, quantity, reason, previous)

    await db.commit()
    await db.refresh(product)
    return product


async def perform_stock_take(
    db: AsyncSession,
    counts: Iterable[StockTakeItem],
) -> List[StockTakeResult]:
    """Reconcile counted quantities with the recorded ones.

    Each counted item is handled on its own: an unknown product is reported
    in the result list and the remaining items are still applied.
    """
    results: List[StockTakeResult] = []

    for item in counts:
        product = await get_product_by_id(db, item.product_id)
        if product is None:
            results.append(StockTakeResult(
                product_id=item.product_id,
                success=False,
                error=f"Product {item.product_id} not found",
            ))
            continue

        difference = item.actual_quantity - product.quantity
        if difference != 0:
            previous = product.quantity
            product.quantity = item.actual_quantity
            product.updated_at = utcnow()
            direction = MovementDirection.IN if difference > 0 else MovementDirection.OUT
            _record_movement(db, product, direction, abs(difference), STOCK_TAKE_REASON, previous)
            await db.commit()

        results.append(StockTakeResult(product_id=product.id, success=True, difference=difference))

    return results


async def inventory_value(db: AsyncSession) -> InventoryValue:
    products = await list_products(db)
    return InventoryValue(
        total_cost_value=round2(sum((to_decimal(p.cost or 0) * p.quantity for p in products), Decimal("0"))),
        total_retail_value=round2(sum((to_decimal(p.price) * p.quantity for p in products), Decimal("0"))),
        total_items=sum(p.quantity for p in products),
        products_count=len(products),
    )


async def stock_movements(
    db: AsyncSession,
    start: datetime,
    end: datetime,
) -> List[StockMovement]:
    return await list_movements_between(db, start, end)


async def best_selling_products(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    limit: int = 10,
) -> List[BestSeller]:
    sales = await list_sales_between(db, start, end)

    quantities: Dict[str, int] = defaultdict(int)
    revenue: Dict[str, Decimal] = defaultdict(Decimal)
    names: Dict[str, str] = {}
    for sale in sales:
        for line in sale.items:
            product_id = line["product_id"]
            names[product_id] = line["name"]
            quantities[product_id] += line["quantity"]
            revenue[product_id] += to_decimal(line["line_total"])

    ranked = sorted(quantities, key=lambda pid: quantities[pid], reverse=True)[:limit]
    return [
        BestSeller(
            product_id=UUID(pid),
            name=names[pid],
            total_quantity=quantities[pid],
            total_revenue=round2(revenue[pid]),
        )
        for pid in ranked
    ]
