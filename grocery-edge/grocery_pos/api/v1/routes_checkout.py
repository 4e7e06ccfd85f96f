# grocery_pos/api/v1/routes_checkout.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db, get_runtime
from grocery_pos.core.errors import NotFoundError
from grocery_pos.domain.cart import storage
from grocery_pos.domain.cart.schemas import (
    AddItemRequest,
    CartLine,
    CartStats,
    DiscountedTotals,
    DiscountRequest,
    SavedCart,
    SaveCartRequest,
    SetQuantityRequest,
)
from grocery_pos.domain.checkout.schemas import CheckoutRequest, SaleOut
from grocery_pos.domain.checkout.service import get_sale
from grocery_pos.domain.coupons.schemas import ApplyCouponRequest
from grocery_pos.domain.coupons.service import apply_coupon
from grocery_pos.domain.inventory.service import get_product
from grocery_pos.runtime import PosRuntime


router = APIRouter(prefix="/api/v1", tags=["checkout"])


@router.get("/cart", response_model=CartStats)
async def cart_summary(runtime: PosRuntime = Depends(get_runtime)):
    return runtime.cart.stats()


@router.get("/cart/items", response_model=List[CartLine])
async def cart_items(runtime: PosRuntime = Depends(get_runtime)):
    return runtime.cart.lines()


@router.post("/cart/items", response_model=CartLine)
async def add_item_endpoint(
    payload: AddItemRequest,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    product = await get_product(db, payload.product_id)
    return runtime.cart.add_item(product, payload.quantity)


@router.patch("/cart/items/{product_id}")
async def set_quantity_endpoint(
    product_id: UUID,
    payload: SetQuantityRequest,
    runtime: PosRuntime = Depends(get_runtime),
):
    line = runtime.cart.set_quantity(product_id, payload.quantity)
    if line is None:
        return Response(status_code=204)
    return line


@router.delete("/cart/items/{product_id}", status_code=204)
async def remove_item_endpoint(
    product_id: UUID,
    runtime: PosRuntime = Depends(get_runtime),
):
    runtime.cart.remove_item(product_id)


@router.delete("/cart", status_code=204)
async def clear_cart_endpoint(runtime: PosRuntime = Depends(get_runtime)):
    runtime.cart.clear()


@router.post("/cart/discount", response_model=DiscountedTotals)
async def discount_preview_endpoint(
    payload: DiscountRequest,
    runtime: PosRuntime = Depends(get_runtime),
):
    return runtime.cart.apply_discount(payload.percent, payload.reason)


@router.post("/cart/coupon", response_model=DiscountedTotals)
async def coupon_preview_endpoint(
    payload: ApplyCouponRequest,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    return await apply_coupon(db, runtime.cart, payload.code)


@router.post("/cart/save", response_model=SavedCart)
async def save_cart_endpoint(
    payload: SaveCartRequest,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    return await storage.save_cart(db, runtime.cart, payload.customer_id)


@router.post("/cart/restore", response_model=SavedCart)
async def restore_cart_endpoint(
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    saved = await storage.restore_cart(db, runtime.cart)
    if saved is None:
        raise NotFoundError("There is no saved cart")
    return saved


@router.post("/checkout", response_model=SaleOut)
async def checkout_endpoint(
    payload: CheckoutRequest,
    runtime: PosRuntime = Depends(get_runtime),
):
    return await runtime.checkout.checkout(
        payload.payment_method,
        payload.amount_paid,
        customer_id=payload.customer_id,
        discount_percent=payload.discount_percent,
        coupon_code=payload.coupon_code,
    )


@router.get("/sales/{sale_id}", response_model=SaleOut)
async def get_sale_endpoint(
    sale_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await get_sale(db, sale_id)
