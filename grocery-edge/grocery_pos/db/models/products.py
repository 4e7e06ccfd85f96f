# grocery_pos/db/models/products.py
import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class Product(Base):
    __tablename__ = "products"

    """A sellable item of the store catalog with its on-hand quantity.

    The quantity column is the single source of truth for stock; it is only
    changed through the inventory service so every change leaves a
    StockMovement behind. Products referenced by sales are deactivated,
    never deleted.
    """

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    barcode = Column(String, nullable=True, unique=True)
    category = Column(String, nullable=True, index=True)
    unit = Column(String, nullable=False, default="piece")

    price = Column(Numeric(18, 2), nullable=False)
    cost = Column(Numeric(18, 2), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=True)
    expiry_date = Column(Date, nullable=True)

    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
