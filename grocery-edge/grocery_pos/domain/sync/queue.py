# grocery_pos/domain/sync/queue.py
import asyncio
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from grocery_pos.core.errors import ConnectivityError, PermanentSyncError
from grocery_pos.core.events import Notifier
from grocery_pos.core.time_utils import as_utc, utcnow
from grocery_pos.db.repositories.local_storage import get_item, set_item
from .schemas import ActionKind, PendingAction, QueueStats, SyncReport

logger = logging.getLogger(__name__)

PENDING_ACTIONS_KEY = "pendingActions"
LAST_SYNC_TIME_KEY = "lastSyncTime"

Handler = Callable[[Dict[str, Any]], Awaitable[Any]]


class OfflineSyncQueue:
    """Durable FIFO of actions to deliver to the remote backend.

    The whole list is rewritten to local storage on every change. A drain
    walks the list once in enqueue order; successes and actions that ran
    out of attempts are removed afterwards, everything else stays in place
    for the next drain. Actions older than the retention window are dropped
    by ``cleanup_old_data`` whether or not they were ever delivered.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        handlers: Mapping[ActionKind, Handler],
        max_attempts: int = 3,
        retry_delay: float = 1.5,
        retention_days: int = 7,
    ):
        self.session_factory = session_factory
        self.handlers = dict(handlers)
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.retention_days = retention_days

        # written by the connectivity monitor
        self.online = True
        self.last_sync_time: Optional[datetime] = None

        self.synced = Notifier("sync.completed")
        self.failed = Notifier("sync.failed")

        self._actions: List[PendingAction] = []
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def draining(self) -> bool:
        return self._draining

    def pending(self) -> List[PendingAction]:
        return [action.model_copy() for action in self._actions]

    def __len__(self) -> int:
        return len(self._actions)

    async def load(self) -> None:
        async with self.session_factory() as db:
            raw = await get_item(db, PENDING_ACTIONS_KEY)
            last_sync = await get_item(db, LAST_SYNC_TIME_KEY)

        try:
            self._actions = [PendingAction.model_validate(item) for item in json.loads(raw)] if raw else []
        except (ValueError, TypeError):
            logger.exception("Stored pending actions are unreadable, starting with an empty queue")
            self._actions = []

        try:
            self.last_sync_time = datetime.fromisoformat(last_sync) if last_sync else None
        except ValueError:
            logger.exception("Stored last sync time %r is unreadable, ignoring it", last_sync)
            self.last_sync_time = None
        logger.info("Sync queue loaded with %d pending actions", len(self._actions))

    async def _persist(self) -> None:
        data = json.dumps([action.model_dump(mode="json") for action in self._actions])
        async with self.session_factory() as db:
            await set_item(db, PENDING_ACTIONS_KEY, data)

    async def _touch_last_sync(self) -> None:
        self.last_sync_time = utcnow()
        async with self.session_factory() as db:
            await set_item(db, LAST_SYNC_TIME_KEY, self.last_sync_time.isoformat())

    async def enqueue(
        self,
        kind: ActionKind,
        payload: Dict[str, Any],
        max_attempts: Optional[int] = None,
    ) -> PendingAction:
        action = PendingAction(
            kind=kind,
            payload=payload,
            max_attempts=max_attempts or self.max_attempts,
        )
        self._actions.append(action)
        await self._persist()
        logger.debug("Queued %s (%s)", action.kind.value, action.id)

        if self.online and not self._draining:
            self.schedule_drain()
        return action

    def schedule_drain(self) -> None:
        if self._drain_task is not None and not self._drain_task.done():
            return
        self._drain_task = asyncio.get_running_loop().create_task(self.drain())

    async def wait_idle(self) -> None:
        """Wait for a drain started in the background by ``enqueue``."""
        if self._drain_task is not None:
            await self._drain_task

    async def _execute(self, action: PendingAction) -> Any:
        handler = self.handlers.get(action.kind)
        if handler is None:
            raise PermanentSyncError(f"No handler for action {action.kind.value}", action.id)
        return await handler(action.payload)

    async def drain(self) -> Optional[SyncReport]:
        if not self.online or self._draining or not self._actions:
            return None

        self._draining = True
        successful: List[PendingAction] = []
        failed: List[PendingAction] = []
        try:
            for action in list(self._actions):
                try:
                    await self._execute(action)
                except PermanentSyncError as exc:
                    action.attempts += 1
                    action.last_error = str(exc)
                    failed.append(action)
                    logger.error("Dropping %s (%s): %s", action.kind.value, action.id, exc)
                except Exception as exc:
                    action.attempts += 1
                    action.last_error = str(exc)
                    if action.attempts >= action.max_attempts:
                        failed.append(action)
                        logger.error(
                            "Giving up on %s (%s) after %d attempts: %s",
                            action.kind.value, action.id, action.attempts, exc,
                        )
                    else:
                        logger.warning(
                            "Sync of %s (%s) failed, attempt %d/%d: %s",
                            action.kind.value, action.id, action.attempts, action.max_attempts, exc,
                        )
                        await asyncio.sleep(self.retry_delay)
                else:
                    successful.append(action)

            settled = {action.id for action in successful + failed}
            self._actions = [action for action in self._actions if action.id not in settled]
            await self._persist()
        finally:
            self._draining = False

        report = SyncReport(
            successful=len(successful),
            failed=len(failed),
            failed_ids=[action.id for action in failed],
        )
        if successful or failed:
            await self._touch_last_sync()
            logger.info("Sync completed: %d successful, %d failed", report.successful, report.failed)
            await self.synced.publish(report)
            for action in failed:
                await self.failed.publish(action)
        return report

    async def force_sync(self) -> Optional[SyncReport]:
        if not self.online:
            raise ConnectivityError("Cannot sync while offline")
        return await self.drain()

    async def cleanup_old_data(
        self,
        retention_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Drop actions older than the retention window.

        This loses data: whatever is dropped here never reaches the backend.
        """
        days = self.retention_days if retention_days is None else retention_days
        cutoff = (now or utcnow()) - timedelta(days=days)

        kept = [action for action in self._actions if as_utc(action.enqueued_at) > cutoff]
        dropped = len(self._actions) - len(kept)
        if dropped:
            self._actions = kept
            await self._persist()
            logger.warning("Dropped %d pending actions older than %d days", dropped, days)
        return dropped

    def stats(self) -> QueueStats:
        counts = {kind: 0 for kind in ActionKind}
        for action in self._actions:
            counts[action.kind] += 1
        return QueueStats(
            total=len(self._actions),
            sales=counts[ActionKind.UPLOAD_SALE],
            customers=counts[ActionKind.SYNC_CUSTOMER],
            products=counts[ActionKind.SYNC_PRODUCT],
            reports=counts[ActionKind.UPLOAD_REPORT],
        )
