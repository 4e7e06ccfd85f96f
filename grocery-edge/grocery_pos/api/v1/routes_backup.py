from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocery_pos.api.deps import get_db
from grocery_pos.domain.backup.schemas import BackupData, ImportSummary
from grocery_pos.domain.backup.service import export_data, import_data


router = APIRouter(prefix="/api/v1/backup", tags=["backup"])


@router.get("/export", response_model=BackupData)
async def export_endpoint(db: AsyncSession = Depends(get_db)):
    return await export_data(db)


@router.post("/import", response_model=ImportSummary)
async def import_endpoint(
    payload: BackupData,
    db: AsyncSession = Depends(get_db),
):
    return await import_data(db, payload)
