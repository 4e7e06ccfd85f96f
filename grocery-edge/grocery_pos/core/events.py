import inspect
import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], Any]


class Notifier:
    """Publish/subscribe channel for UI-facing notifications.

    Subscribers may be plain callables or coroutine functions. A subscriber
    that raises is logged and skipped so one broken listener cannot break
    the component that publishes.
    """

    def __init__(self, name: str):
        self.name = name
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def publish(self, payload: Any) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber %r of %s failed", callback, self.name)

    def publish_nowait(self, payload: Any) -> None:
        """Synchronous publish for callers outside the event loop (cart mutations)."""
        for callback in list(self._subscribers):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    result.close()
                    logger.warning("Async subscriber %r ignored on sync channel %s", callback, self.name)
            except Exception:
                logger.exception("Subscriber %r of %s failed", callback, self.name)

    def __len__(self) -> int:
        return len(self._subscribers)
