# grocery_pos/domain/backup/service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.errors import ValidationError
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.models.coupons import Coupon
from grocery_pos.db.models.customers import Customer
from grocery_pos.db.models.products import Product
from grocery_pos.db.models.sales import Sale
from grocery_pos.db.models.stock_movements import StockMovement
from grocery_pos.db.repositories.backup import delete_all, list_all
from grocery_pos.domain.checkout.schemas import SaleOut
from grocery_pos.domain.coupons.schemas import CouponOut
from .schemas import (
    BACKUP_VERSION,
    BackupData,
    CustomerRecord,
    ImportSummary,
    ProductRecord,
    StockMovementRecord,
)

logger = logging.getLogger(__name__)

BACKED_UP_MODELS = (Product, Customer, Sale, StockMovement, Coupon)


async def export_data(db: AsyncSession) -> BackupData:
    data = BackupData(
        exported_at=utcnow(),
        products=[ProductRecord.model_validate(p) for p in await list_all(db, Product)],
        customers=[CustomerRecord.model_validate(c) for c in await list_all(db, Customer)],
        sales=[SaleOut.model_validate(s) for s in await list_all(db, Sale)],
        stock_movements=[StockMovementRecord.model_validate(m) for m in await list_all(db, StockMovement)],
        coupons=[CouponOut.model_validate(c) for c in await list_all(db, Coupon)],
    )
    logger.info(
        "Exported %d products, %d customers, %d sales",
        len(data.products), len(data.customers), len(data.sales),
    )
    return data


async def import_data(db: AsyncSession, data: BackupData) -> ImportSummary:
    """Replace every backed up table with the contents of ``data``.

    Runs in one transaction: if any record is rejected the store is left
    as it was.
    """
    if data.version != BACKUP_VERSION:
        raise ValidationError(f"Unsupported backup version {data.version}, expected {BACKUP_VERSION}")

    try:
        for model in BACKED_UP_MODELS:
            await delete_all(db, model)
        # rows loaded earlier in this session would clash with the imported ids
        db.expunge_all()

        db.add_all(Product(**record.model_dump()) for record in data.products)
        db.add_all(Customer(**record.model_dump()) for record in data.customers)
        db.add_all(
            Sale(
                **record.model_dump(exclude={"items"}),
                items=[item.model_dump(mode="json") for item in record.items],
            )
            for record in data.sales
        )
        db.add_all(StockMovement(**record.model_dump()) for record in data.stock_movements)
        db.add_all(Coupon(**record.model_dump()) for record in data.coupons)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ValidationError(f"Backup could not be imported: {exc.orig}") from exc

    summary = ImportSummary(
        products=len(data.products),
        customers=len(data.customers),
        sales=len(data.sales),
        stock_movements=len(data.stock_movements),
        coupons=len(data.coupons),
    )
    logger.warning("Store replaced from backup taken at %s: %s", data.exported_at, summary)
    return summary
