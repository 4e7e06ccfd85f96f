"""Tests for the daily sales report."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from grocery_pos.core.time_utils import utcnow
from grocery_pos.domain.reports import service as reports_service
from grocery_pos.domain.reports.service import daily_summary, queue_daily_report
from grocery_pos.domain.sync.schemas import ActionKind


async def test_daily_summary(runtime, session_factory, rice):
    runtime.cart.add_item(rice, 2)
    await runtime.checkout.checkout("cash", 60)
    runtime.cart.add_item(rice, 1)
    await runtime.checkout.checkout("card", 30)

    today = utcnow().date()
    async with session_factory() as db:
        summary = await daily_summary(db, today)
        yesterday = await daily_summary(db, today - timedelta(days=1))

    assert summary.sale_count == 2
    assert summary.total_revenue == Decimal("87.98")
    assert all(row.item_count == 1 for row in summary.sales)
    assert yesterday.sale_count == 0
    assert yesterday.total_revenue == Decimal("0.00")


async def test_queue_daily_report(runtime, session_factory):
    today = utcnow().date()
    async with session_factory() as db:
        action = await queue_daily_report(db, runtime.queue, today)

    assert action.kind == ActionKind.UPLOAD_REPORT
    assert action.payload["id"] == f"daily-{today.isoformat()}"
    assert runtime.queue.stats().reports == 1


async def test_default_day_is_the_utc_day(session_factory, monkeypatch):
    # 00:05 UTC is still the previous day in any timezone west of UTC
    monkeypatch.setattr(reports_service, "utcnow", lambda: datetime(2024, 3, 10, 0, 5, tzinfo=timezone.utc))

    async with session_factory() as db:
        summary = await daily_summary(db)

    assert summary.day == date(2024, 3, 10)


async def test_queue_report_for_default_day(runtime, session_factory, monkeypatch):
    monkeypatch.setattr(reports_service, "utcnow", lambda: datetime(2024, 3, 10, 23, 55, tzinfo=timezone.utc))

    async with session_factory() as db:
        action = await queue_daily_report(db, runtime.queue)

    assert action.payload["id"] == "daily-2024-03-10"
