from datetime import date, datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel


class SaleRow(BaseModel):
    id: UUID
    receipt_number: str
    created_at: datetime
    item_count: int
    total: Decimal


class DailySummary(BaseModel):
    day: date
    total_revenue: Decimal
    sale_count: int
    sales: List[SaleRow]
