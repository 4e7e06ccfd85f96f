# grocery_pos/api/v1/routes_inventory.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db, get_runtime
from grocery_pos.domain.inventory import service
from grocery_pos.domain.inventory.schemas import (
    BulkPriceRequest,
    InventoryValue,
    PriceUpdateResult,
    ProductCreate,
    ProductOut,
    ProductUpdate,
    StockChange,
    StockTakeRequest,
    StockTakeResult,
)
from grocery_pos.domain.sync.schemas import ActionKind
from grocery_pos.runtime import PosRuntime


router = APIRouter(prefix="/api/v1/products", tags=["inventory"])


async def _queue_product_sync(runtime: PosRuntime, product) -> ProductOut:
    out = ProductOut.model_validate(product)
    await runtime.queue.enqueue(ActionKind.SYNC_PRODUCT, out.model_dump(mode="json"))
    return out


@router.get("", response_model=List[ProductOut])
async def list_products_endpoint(
    category: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await service.list_products(db, category)


@router.post("", response_model=ProductOut, status_code=201)
async def create_product_endpoint(
    payload: ProductCreate,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    product = await service.add_product(db, payload)
    return await _queue_product_sync(runtime, product)


@router.get("/low-stock", response_model=List[ProductOut])
async def low_stock_endpoint(db: AsyncSession = Depends(get_db)):
    return await service.low_stock_products(db)


@router.get("/value", response_model=InventoryValue)
async def inventory_value_endpoint(db: AsyncSession = Depends(get_db)):
    return await service.inventory_value(db)


@router.get("/by-barcode/{barcode}", response_model=ProductOut)
async def product_by_barcode_endpoint(
    barcode: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.find_by_barcode(db, barcode)


@router.post("/bulk-prices", response_model=List[PriceUpdateResult])
async def bulk_prices_endpoint(
    payload: BulkPriceRequest,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    results = await service.bulk_update_prices(db, payload.items)
    for result in results:
        if result.product is not None:
            await runtime.queue.enqueue(ActionKind.SYNC_PRODUCT, result.product.model_dump(mode="json"))
    return results


@router.post("/stock-take", response_model=List[StockTakeResult])
async def stock_take_endpoint(
    payload: StockTakeRequest,
    db: AsyncSession = Depends(get_db),
):
    return await service.perform_stock_take(db, payload.items)


@router.get("/{product_id}", response_model=ProductOut)
async def get_product_endpoint(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductOut)
async def update_product_endpoint(
    product_id: UUID,
    payload: ProductUpdate,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    product = await service.update_product(db, product_id, payload)
    return await _queue_product_sync(runtime, product)


@router.delete("/{product_id}", response_model=ProductOut)
async def deactivate_product_endpoint(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await service.deactivate_product(db, product_id)


@router.post("/{product_id}/stock-in", response_model=ProductOut)
async def stock_in_endpoint(
    product_id: UUID,
    payload: StockChange,
    db: AsyncSession = Depends(get_db),
):
    return await service.add_stock(db, product_id, payload.quantity, payload.reason or "restock")


@router.post("/{product_id}/stock-out", response_model=ProductOut)
async def stock_out_endpoint(
    product_id: UUID,
    payload: StockChange,
    db: AsyncSession = Depends(get_db),
):
    return await service.remove_stock(db, product_id, payload.quantity, payload.reason or "manual adjustment")
