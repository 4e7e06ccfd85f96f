from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    barcode: Optional[str] = None
    category: Optional[str] = None
    unit: str = "piece"
    price: Decimal = Field(ge=0, decimal_places=2)
    cost: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    quantity: int = Field(default=0, ge=0)
    min_stock: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None

    @field_validator("name", "barcode", "category")
    @classmethod
    def strip_markup(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return value.strip().replace("<", "").replace(">", "")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    barcode: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    cost: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    min_stock: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    barcode: Optional[str]
    category: Optional[str]
    unit: str
    price: Decimal
    cost: Optional[Decimal]
    quantity: int
    min_stock: Optional[int]
    expiry_date: Optional[date]
    active: bool
    updated_at: datetime


class StockChange(BaseModel):
    quantity: int = Field(gt=0)
    reason: Optional[str] = None


class StockTakeItem(BaseModel):
    product_id: UUID
    actual_quantity: int = Field(ge=0)


class StockTakeResult(BaseModel):
    product_id: UUID
    success: bool
    difference: int = 0
    error: Optional[str] = None


class StockMovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    direction: str
    quantity: int
    reason: str
    previous_quantity: int
    new_quantity: int
    created_at: datetime


class InventoryValue(BaseModel):
    total_cost_value: Decimal
    total_retail_value: Decimal
    total_items: int
    products_count: int


class BestSeller(BaseModel):
    product_id: UUID
    name: str
    total_quantity: int
    total_revenue: Decimal


class StockTakeRequest(BaseModel):
    items: List[StockTakeItem]


class PriceUpdate(BaseModel):
    product_id: UUID
    price: Decimal = Field(ge=0, decimal_places=2)
    cost: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)


class PriceUpdateResult(BaseModel):
    product_id: UUID
    success: bool
    product: Optional[ProductOut] = None
    error: Optional[str] = None


class BulkPriceRequest(BaseModel):
    items: List[PriceUpdate]
