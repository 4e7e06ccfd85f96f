# grocery_pos/db/models/sales.py
import enum
import uuid

from sqlalchemy import JSON, Column, DateTime, Enum, Numeric, String, Uuid
from sqlalchemy.sql import func

from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.base import Base


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    POINTS = "points"


class SyncStatus(str, enum.Enum):
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


class Sale(Base):
    __tablename__ = "sales"

    """A completed checkout.

    Line items are stored as a JSON snapshot of the cart at payment time so
    that receipts and reports never depend on the mutable catalog. Apart
    from sync_status the row is immutable once written.
    """

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    receipt_number = Column(String, nullable=False, index=True)

    items = Column(JSON, nullable=False)

    subtotal = Column(Numeric(18, 2), nullable=False)
    tax = Column(Numeric(18, 2), nullable=False)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(18, 2), nullable=False, default=0)
    coupon_code = Column(String, nullable=True)
    total = Column(Numeric(18, 2), nullable=False)
    amount_paid = Column(Numeric(18, 2), nullable=False)
    change = Column(Numeric(18, 2), nullable=False)

    payment_method = Column(Enum(PaymentMethod, name="payment_method_enum"), nullable=False)
    customer_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    terminal_id = Column(String, nullable=True)
    cashier_id = Column(String, nullable=True)

    sync_status = Column(Enum(SyncStatus, name="sync_status_enum"), nullable=False, default=SyncStatus.PENDING)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)
