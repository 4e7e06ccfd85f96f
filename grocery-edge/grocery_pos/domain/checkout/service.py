# grocery_pos/domain/checkout/service.py
import logging
import math
import random
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grocery_pos.core.errors import (
    DomainError,
    EmptyCartError,
    InsufficientPaymentError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from grocery_pos.core.events import Notifier
from grocery_pos.core.money import round2, to_decimal
from grocery_pos.db.models.sales import PaymentMethod, Sale, SyncStatus
from grocery_pos.db.repositories.products import get_product_by_id
from grocery_pos.db.repositories.sales import get_sale_by_id, set_sync_status
from grocery_pos.domain.cart.engine import CartEngine
from grocery_pos.domain.cart.schemas import CartLine
from grocery_pos.domain.coupons.service import redeem_coupon, validate_coupon
from grocery_pos.domain.customers.service import record_purchase
from grocery_pos.domain.inventory.service import remove_stock
from grocery_pos.domain.sync.queue import OfflineSyncQueue
from grocery_pos.domain.sync.schemas import ActionKind, PendingAction
from .schemas import SaleOut

logger = logging.getLogger(__name__)


def generate_receipt_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """YYMMDDhhmmss plus three random digits.

    Only for display on the printed receipt; sales are keyed by their id.
    """
    now = now or datetime.now()
    suffix = (rng or random).randrange(1000)
    return f"{now:%y%m%d%H%M%S}{suffix:03d}"


def is_finite_positive(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return to_decimal(value).is_finite() and value > 0


async def get_sale(db: AsyncSession, sale_id: UUID) -> Sale:
    sale = await get_sale_by_id(db, sale_id)
    if sale is None:
        raise NotFoundError(f"Sale {sale_id} not found")
    return sale


class CheckoutService:
    """Turns the terminal's cart into a persisted sale.

    Pre-conditions (empty cart, payment, stock) are all checked before the
    first write. After the sale row is written the remaining steps run one
    after the other without a surrounding transaction: a failure while
    decrementing one product or updating loyalty is logged and the
    checkout carries on, so stock can end up only partially decremented.

    The cart is held for the whole checkout. It is read once into a copy
    and only that copy is priced and sold; the cart refuses changes until
    the sold lines have been removed from it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cart: CartEngine,
        queue: OfflineSyncQueue,
        terminal_id: Optional[str] = None,
        cashier_id: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.cart = cart
        self.queue = queue
        self.terminal_id = terminal_id
        self.cashier_id = cashier_id
        self.receipt_hooks = Notifier("checkout.receipt")

    async def checkout(
        self,
        payment_method: Any,
        amount_paid: Any,
        customer_id: Optional[UUID] = None,
        discount_percent: Any = 0,
        coupon_code: Optional[str] = None,
    ) -> SaleOut:
        # the cart stays frozen until the sale is settled
        with self.cart.checking_out():
            return await self._checkout(payment_method, amount_paid, customer_id, discount_percent, coupon_code)

    async def _checkout(
        self,
        payment_method: Any,
        amount_paid: Any,
        customer_id: Optional[UUID],
        discount_percent: Any,
        coupon_code: Optional[str],
    ) -> SaleOut:
        lines = self.cart.snapshot()
        if not lines:
            raise EmptyCartError()

        try:
            method = PaymentMethod(payment_method)
        except ValueError as exc:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise ValidationError(f"Unknown payment method {payment_method!r}, expected one of {allowed}") from exc

        if not is_finite_positive(amount_paid):
            raise ValidationError(f"Amount paid must be a positive number, got {amount_paid!r}")
        paid = round2(amount_paid)

        reason = "invoice discount"
        if coupon_code:
            if discount_percent:
                raise ValidationError("A coupon cannot be combined with a manual discount")
            async with self.session_factory() as db:
                coupon = await validate_coupon(db, coupon_code, self.cart.totals(lines).subtotal)
            discount_percent = coupon.discount_percent
            coupon_code = coupon.code
            reason = f"coupon: {coupon.code}"
        else:
            coupon_code = None

        totals = self.cart.apply_discount(discount_percent, reason, lines=lines)
        if paid < totals.final_total:
            raise InsufficientPaymentError(totals.final_total, paid)

        await self._check_stock(lines)

        receipt_number = generate_receipt_number()

        async with self.session_factory() as db:
            sale = Sale(
                receipt_number=receipt_number,
                items=[line.model_dump(mode="json", exclude={"available"}) for line in lines],
                subtotal=totals.subtotal,
                tax=totals.tax,
                discount_percent=totals.discount_percent,
                discount_amount=totals.discount_amount,
                coupon_code=coupon_code,
                total=totals.final_total,
                amount_paid=paid,
                change=round2(paid - totals.final_total),
                payment_method=method,
                customer_id=customer_id,
                terminal_id=self.terminal_id,
                cashier_id=self.cashier_id,
                sync_status=SyncStatus.PENDING,
            )
            db.add(sale)
            await db.commit()
            await db.refresh(sale)
            result = SaleOut.model_validate(sale)

        for line in lines:
            try:
                async with self.session_factory() as db:
                    await remove_stock(db, line.product_id, line.quantity, f"Sale - receipt {receipt_number}")
            except (DomainError, SQLAlchemyError):
                logger.exception(
                    "Stock for %s was not decremented by %d on receipt %s",
                    line.name, line.quantity, receipt_number,
                )

        if coupon_code is not None:
            try:
                async with self.session_factory() as db:
                    await redeem_coupon(db, coupon_code)
            except (DomainError, SQLAlchemyError):
                logger.exception("Usage of coupon %s was not recorded on receipt %s", coupon_code, receipt_number)

        if customer_id is not None:
            try:
                async with self.session_factory() as db:
                    await record_purchase(db, customer_id, totals.final_total)
            except (DomainError, SQLAlchemyError):
                logger.exception("Loyalty update for customer %s failed on receipt %s", customer_id, receipt_number)

        await self.queue.enqueue(ActionKind.UPLOAD_SALE, result.model_dump(mode="json"))

        self.cart.remove_sold(lines)
        logger.info(
            "Sale %s completed: total %s, paid %s by %s",
            receipt_number, result.total, result.amount_paid, method.value,
        )
        await self.receipt_hooks.publish(result)
        return result

    async def _check_stock(self, lines: List[CartLine]) -> None:
        # stock may have moved since the lines were added
        async with self.session_factory() as db:
            for line in lines:
                product = await get_product_by_id(db, line.product_id)
                if product is None:
                    raise NotFoundError(f"Product {line.name} no longer exists")
                if product.quantity < line.quantity:
                    raise InsufficientStockError(product.name, line.quantity, product.quantity)

    async def mark_sale_synced(self, payload: Dict[str, Any]) -> None:
        async with self.session_factory() as db:
            await set_sync_status(db, UUID(payload["id"]), SyncStatus.SYNCED)

    async def mark_sale_failed(self, action: PendingAction) -> None:
        if action.kind != ActionKind.UPLOAD_SALE:
            return
        async with self.session_factory() as db:
            await set_sync_status(db, UUID(action.payload["id"]), SyncStatus.FAILED)
