# grocery_pos/runtime.py
import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from grocery_pos.core.config import Settings, settings
from grocery_pos.db import base
from grocery_pos.domain.cart.engine import CartEngine
from grocery_pos.domain.checkout.service import CheckoutService
from grocery_pos.domain.sync.connectivity import ConnectivityMonitor, Probe
from grocery_pos.domain.sync.queue import OfflineSyncQueue
from grocery_pos.domain.sync.remote import HttpSyncBackend, SimulatedSyncBackend, build_dispatch

logger = logging.getLogger(__name__)


def build_backend(config: Settings) -> Any:
    if config.SYNC_API_URL:
        return HttpSyncBackend(config.SYNC_API_URL, timeout=config.SYNC_TIMEOUT_SECONDS)
    logger.warning("SYNC_API_URL is not set, sales are delivered to a simulated backend")
    return SimulatedSyncBackend()


class PosRuntime:
    """Everything one terminal needs, wired together.

    Built once by the application (or a test) and handed to the routes; no
    component reaches for a global instance of another.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        engine: Optional[AsyncEngine] = None,
        session_factory: Optional[async_sessionmaker] = None,
        backend: Any = None,
        probe: Optional[Probe] = None,
    ):
        self.settings = config or settings
        if engine is None:
            engine = base.engine if config is None else base.build_engine(self.settings.DB_URL)
        self.engine = engine
        if session_factory is None:
            session_factory = base.build_session_factory(engine)
        self.session_factory = session_factory
        self.backend = backend if backend is not None else build_backend(self.settings)

        self.cart = CartEngine(
            tax_rate=self.settings.TAX_RATE,
            max_line_quantity=self.settings.MAX_LINE_QUANTITY,
            max_discount_percent=self.settings.MAX_DISCOUNT_PERCENT,
        )
        self.queue = OfflineSyncQueue(
            self.session_factory,
            handlers={},
            max_attempts=self.settings.SYNC_MAX_ATTEMPTS,
            retry_delay=self.settings.SYNC_RETRY_DELAY_SECONDS,
            retention_days=self.settings.SYNC_RETENTION_DAYS,
        )
        self.checkout = CheckoutService(
            self.session_factory,
            self.cart,
            self.queue,
            terminal_id=self.settings.TERMINAL_ID,
            cashier_id=self.settings.CASHIER_ID,
        )
        self.queue.handlers.update(build_dispatch(self.backend, self.checkout.mark_sale_synced))
        self.queue.failed.subscribe(self.checkout.mark_sale_failed)

        self.connectivity = ConnectivityMonitor(self.queue, online=self.settings.START_ONLINE, probe=probe)

    async def initialize(self) -> None:
        await base.create_tables(self.engine)
        await self.queue.load()
        await self.connectivity.check()
        if self.connectivity.online and len(self.queue):
            self.queue.schedule_drain()
        logger.info("Terminal %s ready (%s)", self.settings.TERMINAL_ID,
                    "online" if self.connectivity.online else "offline")

    async def shutdown(self) -> None:
        await self.queue.wait_idle()
        await self.backend.aclose()
        logger.info("Terminal %s stopped", self.settings.TERMINAL_ID)
