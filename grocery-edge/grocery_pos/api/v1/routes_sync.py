# grocery_pos/api/v1/routes_sync.py
from typing import List, Optional

from fastapi import APIRouter, Depends

from grocery_pos.api.deps import get_runtime
from grocery_pos.domain.sync.schemas import (
    ConnectivityStatus,
    ConnectivityUpdate,
    PendingAction,
    QueueStats,
    SyncReport,
)
from grocery_pos.runtime import PosRuntime


router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


@router.get("/status", response_model=ConnectivityStatus)
async def sync_status(runtime: PosRuntime = Depends(get_runtime)):
    return runtime.connectivity.status()


@router.get("/pending", response_model=List[PendingAction])
async def pending_actions(runtime: PosRuntime = Depends(get_runtime)):
    return runtime.queue.pending()


@router.get("/stats", response_model=QueueStats)
async def queue_stats(runtime: PosRuntime = Depends(get_runtime)):
    return runtime.queue.stats()


@router.post("/force", response_model=Optional[SyncReport])
async def force_sync(runtime: PosRuntime = Depends(get_runtime)):
    return await runtime.queue.force_sync()


@router.post("/connectivity", response_model=ConnectivityStatus)
async def set_connectivity(
    payload: ConnectivityUpdate,
    runtime: PosRuntime = Depends(get_runtime),
):
    await runtime.connectivity.set_online(payload.online)
    return runtime.connectivity.status()


@router.post("/cleanup")
async def cleanup(runtime: PosRuntime = Depends(get_runtime)):
    return {"dropped": await runtime.queue.cleanup_old_data()}
