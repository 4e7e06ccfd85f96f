# grocery_pos/domain/sync/remote.py
import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from grocery_pos.core.errors import PermanentSyncError, RetryableSyncError
from .queue import Handler
from .schemas import ActionKind

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 425, 429}


class HttpSyncBackend:
    """Client for the head-office API the edge node reports to.

    Every call is safe to repeat: the backend deduplicates on the record id
    carried in the payload.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as exc:
            raise RetryableSyncError(f"Timed out posting to {path}") from exc
        except httpx.HTTPError as exc:
            raise RetryableSyncError(f"Network error posting to {path}: {exc}") from exc

        logger.debug("POST %s -> %s", path, response.status_code)
        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUS:
            raise RetryableSyncError(f"{path} answered {response.status_code}")
        if response.status_code >= 400:
            raise PermanentSyncError(f"{path} rejected the payload with {response.status_code}: {response.text}")

        if not response.content:
            return {"success": True, "id": payload.get("id")}
        return response.json()

    async def upload_sale(self, sale: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/sales", sale)

    async def sync_customer(self, customer: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/customers", customer)

    async def sync_product(self, product: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/products", product)

    async def upload_report(self, report: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post("/reports", report)


class SimulatedSyncBackend:
    """Stand-in backend for terminals that have no head office configured."""

    def __init__(
        self,
        latency: float = 0.0,
        failure_rate: float = 0.0,
        rng: Optional[random.Random] = None,
    ):
        self.latency = latency
        self.failure_rate = failure_rate
        self.rng = rng or random.Random()
        self.received: Dict[str, list] = {kind.value: [] for kind in ActionKind}

    async def _deliver(self, kind: ActionKind, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.failure_rate and self.rng.random() < self.failure_rate:
            raise RetryableSyncError(f"Simulated failure for {kind.value}")
        self.received[kind.value].append(payload)
        return {"success": True, "id": payload.get("id")}

    async def aclose(self) -> None:
        pass

    async def upload_sale(self, sale: Dict[str, Any]) -> Dict[str, Any]:
        return await self._deliver(ActionKind.UPLOAD_SALE, sale)

    async def sync_customer(self, customer: Dict[str, Any]) -> Dict[str, Any]:
        return await self._deliver(ActionKind.SYNC_CUSTOMER, customer)

    async def sync_product(self, product: Dict[str, Any]) -> Dict[str, Any]:
        return await self._deliver(ActionKind.SYNC_PRODUCT, product)

    async def upload_report(self, report: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._deliver(ActionKind.UPLOAD_REPORT, report)
        return {"success": True, "reportId": result["id"]}


def build_dispatch(
    backend: Any,
    on_sale_uploaded: Optional[Callable[[Dict[str, Any]], Awaitable[None]]] = None,
) -> Dict[ActionKind, Handler]:
    async def upload_sale(payload: Dict[str, Any]) -> Dict[str, Any]:
        result = await backend.upload_sale(payload)
        if on_sale_uploaded is not None:
            await on_sale_uploaded(payload)
        return result

    return {
        ActionKind.UPLOAD_SALE: upload_sale,
        ActionKind.SYNC_CUSTOMER: backend.sync_customer,
        ActionKind.SYNC_PRODUCT: backend.sync_product,
        ActionKind.UPLOAD_REPORT: backend.upload_report,
    }
