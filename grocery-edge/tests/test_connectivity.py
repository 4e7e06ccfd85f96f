"""Tests for the connectivity monitor."""

import pytest

from grocery_pos.domain.sync.connectivity import ConnectivityMonitor
from grocery_pos.domain.sync.queue import OfflineSyncQueue
from grocery_pos.domain.sync.schemas import ActionKind


@pytest.fixture
def delivered():
    return []


@pytest.fixture
def queue(session_factory, delivered):
    async def deliver(payload):
        delivered.append(payload["id"])
        return {"success": True}

    return OfflineSyncQueue(session_factory, {kind: deliver for kind in ActionKind}, retry_delay=0)


class TestConnectivityMonitor:
    """Online/offline transitions."""

    def test_initial_state_is_pushed_to_queue(self, queue):
        monitor = ConnectivityMonitor(queue, online=False)
        assert monitor.online is False
        assert queue.online is False

    async def test_going_online_drains(self, queue, delivered):
        monitor = ConnectivityMonitor(queue, online=False)
        events = []
        monitor.changed.subscribe(events.append)
        await queue.enqueue(ActionKind.UPLOAD_SALE, {"id": "sale-1"})

        report = await monitor.set_online(True)

        assert report.successful == 1
        assert delivered == ["sale-1"]
        assert events == [{"online": True}]
        assert monitor.status().last_sync_at is not None

    async def test_going_offline_does_not_drain(self, queue, delivered):
        monitor = ConnectivityMonitor(queue, online=True)
        events = []
        monitor.changed.subscribe(events.append)

        await monitor.set_online(False)
        await queue.enqueue(ActionKind.UPLOAD_SALE, {"id": "sale-1"})
        await queue.wait_idle()

        assert delivered == []
        assert events == [{"online": False}]
        assert queue.online is False

    async def test_repeated_state_is_ignored(self, queue):
        monitor = ConnectivityMonitor(queue, online=True)
        events = []
        monitor.changed.subscribe(events.append)

        assert await monitor.set_online(True) is None
        assert events == []

    async def test_check_uses_probe(self, queue, delivered):
        answers = [True]

        async def probe():
            return answers[0]

        monitor = ConnectivityMonitor(queue, online=False, probe=probe)
        await queue.enqueue(ActionKind.SYNC_PRODUCT, {"id": "prod-1"})

        assert await monitor.check() is True
        assert delivered == ["prod-1"]

        answers[0] = False
        assert await monitor.check() is False
        assert monitor.online is False

    async def test_check_without_probe_keeps_state(self, queue):
        monitor = ConnectivityMonitor(queue, online=False)
        assert await monitor.check() is False

    async def test_status(self, queue):
        monitor = ConnectivityMonitor(queue, online=False)
        await queue.enqueue(ActionKind.UPLOAD_SALE, {"id": "sale-1"})

        status = monitor.status()

        assert status.online is False
        assert status.pending == 1
        assert status.draining is False
        assert status.last_sync_at is None
