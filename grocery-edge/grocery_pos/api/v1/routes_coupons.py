# grocery_pos/api/v1/routes_coupons.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db
from grocery_pos.domain.coupons import service
from grocery_pos.domain.coupons.schemas import CouponCreate, CouponOut


router = APIRouter(prefix="/api/v1/coupons", tags=["coupons"])


@router.get("", response_model=List[CouponOut])
async def list_coupons_endpoint(db: AsyncSession = Depends(get_db)):
    return await service.all_coupons(db)


@router.post("", response_model=CouponOut, status_code=201)
async def create_coupon_endpoint(
    payload: CouponCreate,
    db: AsyncSession = Depends(get_db),
):
    return await service.create_coupon(db, payload)


@router.get("/{code}", response_model=CouponOut)
async def get_coupon_endpoint(
    code: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_coupon(db, code)
