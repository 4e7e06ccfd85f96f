# grocery_pos/api/v1/routes_reports.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db, get_runtime
from grocery_pos.domain.reports.schemas import DailySummary
from grocery_pos.domain.reports.service import daily_summary, queue_daily_report
from grocery_pos.domain.sync.schemas import PendingAction
from grocery_pos.runtime import PosRuntime


router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/daily", response_model=DailySummary)
async def daily_summary_endpoint(
    day: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
):
    return await daily_summary(db, day)


@router.post("/daily/upload", response_model=PendingAction, status_code=202)
async def upload_daily_report_endpoint(
    day: Optional[date] = None,
    runtime: PosRuntime = Depends(get_runtime),
    db: AsyncSession = Depends(get_db),
):
    return await queue_daily_report(db, runtime.queue, day)
