import uuid

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    """A registered customer and their loyalty balance.

    Loyalty and purchase counters are only touched by checkout.
    """

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=True)

    loyalty_points = Column(Integer, nullable=False, default=0)
    total_purchases = Column(Numeric(18, 2), nullable=False, default=0)
    purchase_count = Column(Integer, nullable=False, default=0)
    last_purchase_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
