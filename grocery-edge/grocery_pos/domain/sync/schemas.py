# grocery_pos/domain/sync/schemas.py
import enum
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from grocery_pos.core.time_utils import utcnow


class ActionKind(str, enum.Enum):
    UPLOAD_SALE = "uploadSale"
    SYNC_CUSTOMER = "syncCustomer"
    SYNC_PRODUCT = "syncProduct"
    UPLOAD_REPORT = "uploadReport"


class PendingAction(BaseModel):
    """A unit of work waiting for the remote backend.

    Serialized as-is into local storage; the queue is reloaded from that
    list at startup.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: ActionKind
    payload: Dict[str, Any]
    attempts: int = 0
    max_attempts: int = 3
    enqueued_at: datetime = Field(default_factory=utcnow)
    last_error: Optional[str] = None


class SyncReport(BaseModel):
    successful: int
    failed: int
    failed_ids: List[str] = []


class QueueStats(BaseModel):
    total: int
    sales: int
    customers: int
    products: int
    reports: int


class ConnectivityStatus(BaseModel):
    online: bool
    draining: bool
    pending: int
    last_sync_at: Optional[datetime]


class ConnectivityUpdate(BaseModel):
    online: bool
