from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from grocery_pos.db.models.stock_movements import MovementDirection
from grocery_pos.domain.checkout.schemas import SaleOut
from grocery_pos.domain.coupons.schemas import CouponOut
from grocery_pos.domain.customers.schemas import CustomerOut
from grocery_pos.domain.inventory.schemas import ProductOut, StockMovementOut

BACKUP_VERSION = 1


class ProductRecord(ProductOut):
    created_at: datetime


class CustomerRecord(CustomerOut):
    created_at: datetime


class StockMovementRecord(StockMovementOut):
    direction: MovementDirection


class BackupData(BaseModel):
    """Every business record of the terminal, as exported and imported.

    The sync queue and other local storage entries are not part of it.
    """

    version: int = BACKUP_VERSION
    exported_at: datetime
    products: List[ProductRecord] = Field(default_factory=list)
    customers: List[CustomerRecord] = Field(default_factory=list)
    sales: List[SaleOut] = Field(default_factory=list)
    stock_movements: List[StockMovementRecord] = Field(default_factory=list)
    coupons: List[CouponOut] = Field(default_factory=list)


class ImportSummary(BaseModel):
    products: int
    customers: int
    sales: int
    stock_movements: int
    coupons: int
