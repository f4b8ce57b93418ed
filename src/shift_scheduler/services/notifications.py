"""Domain events emitted by the scheduling core for a notification dispatcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    SCHEDULE_CREATED = "SCHEDULE_CREATED"
    SCHEDULE_REJECTED = "SCHEDULE_REJECTED"
    SHORTAGE_DETECTED = "SHORTAGE_DETECTED"


@dataclass(frozen=True)
class DomainEvent:
    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventDispatcher(Protocol):
    def publish(self, event: DomainEvent) -> None: ...


class NullDispatcher:
    def publish(self, event: DomainEvent) -> None:
        logger.debug("Dropping %s event, no dispatcher configured", event.type.value)


Subscriber = Callable[[DomainEvent], None]


class InMemoryEventBus:
    """Synchronous fan-out to subscribers; keeps a history for inspection."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self.history: list[DomainEvent] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def publish(self, event: DomainEvent) -> None:
        self.history.append(event)
        for subscriber in list(self._subscribers):
            subscriber(event)

    def of_type(self, event_type: EventType) -> list[DomainEvent]:
        return [event for event in self.history if event.type is event_type]


def emit(dispatcher: EventDispatcher, event: DomainEvent) -> None:
    """Fire-and-forget publish: dispatcher failures never reach the caller."""

    try:
        dispatcher.publish(event)
    except Exception:
        logger.exception("Failed to dispatch %s event", event.type.value)


__all__ = [
    "DomainEvent",
    "EventDispatcher",
    "EventType",
    "InMemoryEventBus",
    "NullDispatcher",
    "emit",
]
