from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CouponCreate(BaseModel):
    code: str = Field(min_length=1)
    discount_percent: Decimal = Field(gt=0, le=100, decimal_places=2)
    min_order_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    max_usage: Optional[int] = Field(default=None, gt=0)
    expiry_date: Optional[date] = None

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("code must not be blank")
        return value


class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    discount_percent: Decimal
    min_order_amount: Decimal
    max_usage: Optional[int]
    usage_count: int
    expiry_date: Optional[date]
    created_at: datetime


class ApplyCouponRequest(BaseModel):
    code: str
