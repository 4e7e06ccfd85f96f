# grocery_pos/domain/cart/engine.py
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional
from uuid import UUID

import pydantic

from grocery_pos.core.errors import (
    CheckoutInProgressError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from grocery_pos.core.events import Notifier
from grocery_pos.core.money import round2, to_decimal
from grocery_pos.core.time_utils import utcnow
from .schemas import CartLine, CartStats, CartTotals, DiscountedTotals, ProductSnapshot

logger = logging.getLogger(__name__)

UNCATEGORISED = "uncategorised"


def _is_whole_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CartEngine:
    """In-memory cart of one terminal.

    Lines are keyed by product id and kept in insertion order. Prices are
    snapshotted when a product is first added; later catalog price changes
    do not affect lines already in the cart. Every mutation publishes the
    new totals on ``changed``.

    While a checkout holds the cart (``checking_out``) every mutation fails
    with ``CheckoutInProgressError``; only ``remove_sold`` may change it.
    """

    def __init__(
        self,
        tax_rate: Decimal = Decimal("0.15"),
        max_line_quantity: int = 999,
        max_discount_percent: Decimal = Decimal("50"),
    ):
        self.tax_rate = to_decimal(tax_rate)
        self.max_line_quantity = max_line_quantity
        self.min_discount_percent = Decimal("0")
        self.max_discount_percent = to_decimal(max_discount_percent)
        self.changed = Notifier("cart.changed")
        self._lines: Dict[UUID, CartLine] = {}
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    @contextmanager
    def checking_out(self) -> Iterator[None]:
        if self._locked:
            raise CheckoutInProgressError()
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise CheckoutInProgressError("The cart cannot be changed while a checkout is in progress")

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def snapshot(self) -> List[CartLine]:
        """Deep copies of the lines, safe to store on a sale."""
        return [line.model_copy(deep=True) for line in self._lines.values()]

    def _validate_quantity(self, quantity: Any) -> None:
        if not _is_whole_number(quantity) or quantity <= 0 or quantity > self.max_line_quantity:
            raise ValidationError(
                f"Quantity must be a whole number between 1 and {self.max_line_quantity}, got {quantity!r}"
            )

    def add_item(self, product: Any, quantity: int = 1) -> CartLine:
        self._ensure_unlocked()
        try:
            snapshot = ProductSnapshot.model_validate(product)
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid product data: {exc.errors()[0]['msg']}") from exc

        self._validate_quantity(quantity)

        line = self._lines.get(snapshot.id)
        requested = quantity + (line.quantity if line else 0)

        if requested > self.max_line_quantity:
            raise InsufficientStockError(snapshot.name, requested, min(snapshot.quantity, self.max_line_quantity))
        if requested > snapshot.quantity:
            raise InsufficientStockError(snapshot.name, requested, snapshot.quantity)

        if line is None:
            line = CartLine(
                product_id=snapshot.id,
                name=snapshot.name,
                unit_price=round2(snapshot.price),
                quantity=quantity,
                line_total=round2(snapshot.price * quantity),
                unit=snapshot.unit,
                barcode=snapshot.barcode,
                category=snapshot.category,
                available=snapshot.quantity,
                added_at=utcnow(),
            )
            self._lines[snapshot.id] = line
        else:
            line.quantity = requested
            line.line_total = round2(line.unit_price * requested)
            line.available = snapshot.quantity

        logger.debug("Cart: %s x%s", line.name, line.quantity)
        self._notify()
        return line

    def remove_item(self, product_id: UUID) -> None:
        self._ensure_unlocked()
        if self._lines.pop(product_id, None) is None:
            raise NotFoundError(f"Product {product_id} is not in the cart")
        self._notify()

    def set_quantity(self, product_id: UUID, quantity: int) -> Optional[CartLine]:
        self._ensure_unlocked()
        if not _is_whole_number(quantity) or quantity < 0:
            raise ValidationError(f"Quantity must be a whole number, got {quantity!r}")
        if quantity > self.max_line_quantity:
            raise ValidationError(f"Maximum quantity per line is {self.max_line_quantity}")

        line = self._lines.get(product_id)
        if line is None:
            raise NotFoundError(f"Product {product_id} is not in the cart")

        if quantity == 0:
            self.remove_item(product_id)
            return None

        line.quantity = quantity
        line.line_total = round2(line.unit_price * quantity)
        self._notify()
        return line

    def clear(self) -> None:
        self._ensure_unlocked()
        self._lines.clear()
        self._notify()

    def restore(self, lines: Iterable[CartLine]) -> None:
        """Replace the cart contents with previously saved lines."""
        self._ensure_unlocked()
        self._lines = {line.product_id: line.model_copy(deep=True) for line in lines}
        self._notify()

    def remove_sold(self, lines: Iterable[CartLine]) -> None:
        """Drop the lines a checkout has just sold.

        Called by the checkout holding the cart, so it skips the lock.
        """
        for line in lines:
            self._lines.pop(line.product_id, None)
        self._notify()

    def totals(self, lines: Optional[Iterable[CartLine]] = None) -> CartTotals:
        lines = list(self._lines.values() if lines is None else lines)
        subtotal = round2(sum((line.line_total for line in lines), Decimal("0")))
        tax = round2(subtotal * self.tax_rate)
        item_count = sum(line.quantity for line in lines)
        return CartTotals(
            subtotal=subtotal,
            tax=tax,
            total=round2(subtotal + tax),
            item_count=item_count,
            unique_line_count=len(lines),
            average_item_price=round2(subtotal / item_count) if item_count else Decimal("0.00"),
        )

    def apply_discount(
        self,
        percent: Any,
        reason: str = "general discount",
        lines: Optional[Iterable[CartLine]] = None,
    ) -> DiscountedTotals:
        """Preview the totals with a percentage discount off the subtotal.

        Nothing is stored. Checkout passes its own copy of the lines so the
        charged totals match exactly what it sells.
        """
        if isinstance(percent, bool):
            raise ValidationError(f"Invalid discount percent {percent!r}")
        try:
            value = to_decimal(percent)
        except ValueError as exc:
            raise ValidationError(f"Invalid discount percent {percent!r}") from exc
        if not value.is_finite() or not (self.min_discount_percent <= value <= self.max_discount_percent):
            raise ValidationError(
                f"Discount must be between {self.min_discount_percent}% and {self.max_discount_percent}%, got {percent}"
            )

        totals = self.totals(lines)
        discount_amount = round2(totals.subtotal * value / 100)
        return DiscountedTotals(
            **totals.model_dump(),
            discount_percent=value,
            discount_amount=discount_amount,
            discount_reason=reason.strip().replace("<", "").replace(">", ""),
            final_total=round2(totals.total - discount_amount),
        )

    def stats(self) -> CartStats:
        categories: Dict[str, int] = {}
        for line in self._lines.values():
            key = line.category or UNCATEGORISED
            categories[key] = categories.get(key, 0) + line.quantity

        added = [line.added_at for line in self._lines.values()]
        return CartStats(
            **self.totals().model_dump(),
            categories=categories,
            oldest_item_at=min(added) if added else None,
            newest_item_at=max(added) if added else None,
        )

    def _notify(self) -> None:
        self.changed.publish_nowait(self.totals())
