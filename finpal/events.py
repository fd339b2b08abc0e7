import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

__all__ = ['EventBus', 'OnChange', 'OnError', 'Unsubscribe']

logger = logging.getLogger(__name__)

OnChange = Callable[[Tuple[Dict[str, Any], ...]], None]
OnError = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class _Subscription(NamedTuple):
    on_change: OnChange
    on_error: Optional[OnError]


class EventBus:
    """Push feed of full collections keyed by channel name.

    Subscribers get the whole current collection on every publish and a
    callable that cancels their registration.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[_Subscription]] = {}

    def subscribe(self, name: str, on_change: OnChange, on_error: Optional[OnError] = None) -> Unsubscribe:
        sub = _Subscription(on_change, on_error)
        self._subscribers.setdefault(name, []).append(sub)

        def unsubscribe() -> None:
            subs = self._subscribers.get(name, [])
            if sub in subs:
                subs.remove(sub)

        return unsubscribe

    def publish(self, name: str, records) -> int:
        records = tuple(records)
        delivered = 0
        for sub in list(self._subscribers.get(name, [])):
            try:
                sub.on_change(records)
                delivered += 1
            except Exception as e:
                logger.exception("Subscriber to %s failed", name)
                self._deliver_error(sub, e)
        return delivered

    def fail(self, name: str, error: Exception) -> None:
        logger.error("Feed %s failed: %s", name, error)
        for sub in list(self._subscribers.get(name, [])):
            self._deliver_error(sub, error)

    @staticmethod
    def _deliver_error(sub: _Subscription, error: Exception) -> None:
        if sub.on_error is None:
            return
        try:
            sub.on_error(error)
        except Exception:
            logger.exception("Error callback failed")
