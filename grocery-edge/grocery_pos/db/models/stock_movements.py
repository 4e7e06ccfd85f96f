# grocery_pos/db/models/stock_movements.py
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, Integer, String, Uuid
from sqlalchemy.sql import func

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class MovementDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class StockMovement(Base):
    __tablename__ = "stock_movements"

    """Append-only audit entry for one change of a product's quantity."""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    direction = Column(Enum(MovementDirection, name="movement_direction_enum"), nullable=False)
    quantity = Column(Integer, nullable=False)
    reason = Column(String, nullable=False)

    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)
