import uuid

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class Coupon(Base):
    """A discount code handed out to customers.

    A coupon grants a percentage off the subtotal when the order reaches
    min_order_amount, until it expires or has been redeemed max_usage times.
    A null max_usage means unlimited.
    """

    __tablename__ = "coupons"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String, nullable=False, unique=True)

    discount_percent = Column(Numeric(5, 2), nullable=False)
    min_order_amount = Column(Numeric(18, 2), nullable=False, default=0)
    max_usage = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    expiry_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
