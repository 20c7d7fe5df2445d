"""Synchronous in-process event bus with subclass-aware dispatch."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe bus for domain events.

    A handler subscribed to a base class also receives every subclass event.
    Dispatch runs from the most specific type outwards, and within one type in
    registration order. Handler errors propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable) -> None:
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: type) -> list[Callable]:
        """Handlers an event of *event_type* reaches, in call order."""
        ordered: list[Callable] = []
        for klass in event_type.__mro__:
            ordered.extend(self._subscribers.get(klass, []))
        return ordered

    def publish(self, event: Any) -> None:
        handlers = self.handlers_for(type(event))
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
