# grocery_pos/core/errors.py
from decimal import Decimal
from typing import Optional


class DomainError(Exception):
    """Base class for errors raised by the POS domain layer.

    The message is meant to be shown to the cashier as-is, so it always
    carries the entity and the numbers involved.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class BusinessError(DomainError):
    pass


class InsufficientStockError(BusinessError):
    def __init__(self, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}: requested {requested}, available {available}"
        )
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InsufficientPaymentError(BusinessError):
    def __init__(self, required: Decimal, paid: Decimal):
        super().__init__(f"Amount paid {paid:.2f} is less than the amount due {required:.2f}")
        self.required = required
        self.paid = paid


class EmptyCartError(BusinessError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class CheckoutInProgressError(BusinessError):
    def __init__(self, message: str = "Another checkout is already in progress"):
        super().__init__(message)


class ConnectivityError(DomainError):
    def __init__(self, message: str = "No network connection"):
        super().__init__(message)


class SyncError(DomainError):
    pass


class RetryableSyncError(SyncError):
    """Transient remote failure; the queue keeps the action for another pass."""


class PermanentSyncError(SyncError):
    """The action will never be delivered and is dropped from the queue."""

    def __init__(self, message: str, action_id: Optional[str] = None):
        super().__init__(message)
        self.action_id = action_id
