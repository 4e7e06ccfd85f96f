# grocery_pos/api/v1/routes_customers.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db, get_runtime
from grocery_pos.domain.customers import service
from grocery_pos.domain.checkout.schemas import SaleOut
from grocery_pos.domain.customers.schemas import CustomerCreate, CustomerOut
from grocery_pos.domain.sync.schemas import ActionKind
from grocery_pos.runtime import PosRuntime


router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.get("", response_model=List[CustomerOut])
async def list_customers_endpoint(db: AsyncSession = Depends(get_db)):
    return await service.all_customers(db)


@router.post("", response_model=CustomerOut, status_code=201)
async def create_customer_endpoint(
    payload: CustomerCreate,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    customer = CustomerOut.model_validate(await service.create_customer(db, payload))
    await runtime.queue.enqueue(ActionKind.SYNC_CUSTOMER, customer.model_dump(mode="json"))
    return customer


@router.get("/by-phone/{phone}", response_model=CustomerOut)
async def customer_by_phone_endpoint(
    phone: str,
    db: AsyncSession = Depends(get_db),
):
    return await service.find_by_phone(db, phone)


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer_endpoint(
    customer_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_customer(db, customer_id)


@router.get("/{customer_id}/sales", response_model=List[SaleOut])
async def customer_sales_endpoint(
    customer_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await service.purchase_history(db, customer_id)
