import logging
from typing import Awaitable, Callable, Optional

import httpx

from grocery_pos.core.events import Notifier
from .queue import OfflineSyncQueue
from .schemas import ConnectivityStatus, SyncReport

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[bool]]


def http_probe(url: str, timeout: float = 2.0) -> Probe:
    """Probe that reports online when ``url`` answers with anything below 500."""

    async def probe() -> bool:
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError:
            return False
        return response.status_code < 500

    return probe


class ConnectivityMonitor:
    """Online/offline state of the terminal.

    The host pushes changes through ``set_online`` (or asks for a probe via
    ``check``); nothing here polls. Going online drains the sync queue.
    """

    def __init__(
        self,
        queue: OfflineSyncQueue,
        online: bool = True,
        probe: Optional[Probe] = None,
    ):
        self.queue = queue
        self.probe = probe
        self.online = online
        self.queue.online = online
        self.changed = Notifier("connectivity.changed")

    async def set_online(self, online: bool) -> Optional[SyncReport]:
        if online == self.online:
            return None

        self.online = online
        self.queue.online = online
        logger.info("Connection %s", "restored" if online else "lost")
        await self.changed.publish({"online": online})

        if online:
            return await self.queue.drain()
        return None

    async def check(self) -> bool:
        if self.probe is not None:
            await self.set_online(await self.probe())
        return self.online

    def status(self) -> ConnectivityStatus:
        return ConnectivityStatus(
            online=self.online,
            draining=self.queue.draining,
            pending=len(self.queue),
            last_sync_at=self.queue.last_sync_time,
        )
