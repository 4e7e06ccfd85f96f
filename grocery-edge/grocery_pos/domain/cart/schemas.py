# grocery_pos/domain/cart/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class ProductSnapshot(BaseModel):
    """The fields of a catalog product the cart needs at add time."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    quantity: StrictInt = Field(ge=0)
    unit: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_markup(cls, value: str) -> str:
        value = value.strip().replace("<", "").replace(">", "")
        if not value:
            raise ValueError("name must not be blank")
        return value


class CartLine(BaseModel):
    product_id: UUID
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    unit: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    # stock seen at add time, re-checked against the store at checkout
    available: int
    added_at: datetime


class CartTotals(BaseModel):
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int
    unique_line_count: int
    average_item_price: Decimal


class DiscountedTotals(CartTotals):
    discount_percent: Decimal
    discount_amount: Decimal
    discount_reason: str
    final_total: Decimal


class CartStats(CartTotals):
    categories: Dict[str, int]
    oldest_item_at: Optional[datetime]
    newest_item_at: Optional[datetime]


class AddItemRequest(BaseModel):
    product_id: UUID
    quantity: int = 1


class SetQuantityRequest(BaseModel):
    quantity: int


class DiscountRequest(BaseModel):
    percent: Decimal
    reason: str = "general discount"


class SavedCart(BaseModel):
    """A cart parked in local storage, restored later on the same terminal."""

    items: List[CartLine]
    customer_id: Optional[UUID] = None
    saved_at: datetime


class SaveCartRequest(BaseModel):
    customer_id: Optional[UUID] = None
