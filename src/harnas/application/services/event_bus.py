from bisect import insort
from collections import defaultdict
from dataclasses import dataclass, field
import logging
from typing import Callable, DefaultDict, Iterable, List, Type

from harnas.domain.events import RunEvent


RunEventHandler = Callable[[RunEvent], None]

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _Subscription:
    priority: int
    order: int
    handler: RunEventHandler = field(compare=False)


class EventBus:
    """Synchronous publish/subscribe for run events.

    Handlers for one event type run in ascending priority, then in the
    order they subscribed. A failing handler is logged and recorded; the
    remaining handlers still run and the publishing action carries on.
    """

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[Type[RunEvent], List[_Subscription]] = defaultdict(list)
        self._subscribed = 0
        self._failures: List[Exception] = []

    def subscribe(self, event_type: Type[RunEvent], handler: RunEventHandler, *, priority: int = 100) -> None:
        insort(self._subscriptions[event_type], _Subscription(int(priority), self._subscribed, handler))
        self._subscribed += 1

    def subscribe_many(
        self, event_types: Iterable[Type[RunEvent]], handler: RunEventHandler, *, priority: int = 100
    ) -> None:
        for event_type in event_types:
            self.subscribe(event_type, handler, priority=priority)

    def publish(self, event: RunEvent) -> None:
        self._failures = []
        for subscription in tuple(self._subscriptions[type(event)]):
            try:
                subscription.handler(event)
            except Exception as exc:
                self._failures.append(exc)
                logger.exception(
                    "%s handler %r failed (priority %s)",
                    type(event).__name__,
                    subscription.handler,
                    subscription.priority,
                )

    def last_publish_errors(self) -> List[Exception]:
        return list(self._failures)
