from grocery_pos.db.models.coupons import Coupon
from grocery_pos.db.models.customers import Customer
from grocery_pos.db.models.local_storage import LocalStorageEntry
from grocery_pos.db.models.products import Product
from grocery_pos.db.models.sales import PaymentMethod, Sale, SyncStatus
from grocery_pos.db.models.stock_movements import MovementDirection, StockMovement

__all__ = [
    "Coupon",
    "Customer",
    "LocalStorageEntry",
    "MovementDirection",
    "PaymentMethod",
    "Product",
    "Sale",
    "StockMovement",
    "SyncStatus",
]
