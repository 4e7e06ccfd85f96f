from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=3)
    email: Optional[str] = None


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    email: Optional[str]
    loyalty_points: int
    total_purchases: Decimal
    purchase_count: int
    last_purchase_at: Optional[datetime]


class LoyaltyUpdate(BaseModel):
    points_earned: int
    total_points: int
