# grocery_pos/domain/reports/service.py
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.core.money import round2
from grocery_pos.core.time_utils import utcnow
from grocery_pos.db.repositories.sales import list_sales_between
from grocery_pos.domain.sync.queue import OfflineSyncQueue
from grocery_pos.domain.sync.schemas import ActionKind, PendingAction
from .schemas import DailySummary, SaleRow


async def daily_summary(
    db: AsyncSession,
    day: Optional[date] = None,
) -> DailySummary:
    # day bounds are UTC, so the default day is too
    day = day or utcnow().date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(day, time.max, tzinfo=timezone.utc)
    sales = await list_sales_between(db, start, end)

    return DailySummary(
        day=day,
        total_revenue=round2(sum((sale.total for sale in sales), Decimal("0"))),
        sale_count=len(sales),
        sales=[
            SaleRow(
                id=sale.id,
                receipt_number=sale.receipt_number,
                created_at=sale.created_at,
                item_count=len(sale.items),
                total=sale.total,
            )
            for sale in sales
        ],
    )


async def queue_daily_report(
    db: AsyncSession,
    queue: OfflineSyncQueue,
    day: Optional[date] = None,
) -> PendingAction:
    summary = await daily_summary(db, day)
    day = summary.day
    payload = summary.model_dump(mode="json")
    payload["id"] = f"daily-{day.isoformat()}"
    return await queue.enqueue(ActionKind.UPLOAD_REPORT, payload)
