"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, Iterable, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Handlers run synchronously.  A failing handler is logged and skipped:
    the state change that produced the event is already committed and other
    subscribers still receive it.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(type(event), []):
            try:
                handler.handle(event)
            except Exception:
                logger.exception(
                    "event_bus.handler_failed",
                    event_name=event.event_name,
                    event_id=str(event.event_id),
                    aggregate_id=str(event.aggregate_id),
                    handler=type(handler).__name__,
                )

    def publish_on_commit(self, events: Iterable[DomainEvent]) -> None:
        """Deliver *events* once the current transaction commits.

        Outside a transaction (autocommit) delivery is immediate.
        """
        for event in list(events):
            transaction.on_commit(lambda event=event: self.publish(event))

    def clear(self) -> None:
        self._handlers.clear()


# Global bus instance (singleton)

event_bus = InMemoryEventBus()
