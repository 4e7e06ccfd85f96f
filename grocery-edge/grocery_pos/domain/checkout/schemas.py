# grocery_pos/domain/checkout/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from grocery_pos.db.models.sales import PaymentMethod, SyncStatus


class CheckoutRequest(BaseModel):
    payment_method: str
    amount_paid: Decimal
    customer_id: Optional[UUID] = None
    discount_percent: Decimal = Decimal("0")
    coupon_code: Optional[str] = None


class SaleLineOut(BaseModel):
    product_id: UUID
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    unit: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    added_at: datetime


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    receipt_number: str
    items: List[SaleLineOut]
    subtotal: Decimal
    tax: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    coupon_code: Optional[str] = None
    total: Decimal
    amount_paid: Decimal
    change: Decimal
    payment_method: PaymentMethod
    customer_id: Optional[UUID]
    terminal_id: Optional[str]
    cashier_id: Optional[str]
    sync_status: SyncStatus
    created_at: datetime
