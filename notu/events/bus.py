"""
Event Bus.

Synchronous in-process publish/subscribe. Lets the session layer announce
that the session is over without holding a reference to the application
state that has to react to it.

The bus is built once by the composition root and injected into both
sides; there is no module-level instance.

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(SESSION_ENDED, handler)
    bus.publish(SessionEnded(source="session-manager"))
"""

from collections import defaultdict
from collections.abc import Callable

from notu.core.logging import get_logger
from notu.events.schemas import EventEnvelope

logger = get_logger(__name__)

Handler = Callable[[EventEnvelope], None]


class EventBus:
    """Routes events to the handlers subscribed to their event_type."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            A callable that removes the subscription
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def publish(self, event: EventEnvelope) -> int:
        """
        Deliver an event to its subscribers in subscription order.

        Handler exceptions propagate to the publisher.

        Returns:
            Number of handlers invoked
        """
        handlers = list(self._handlers.get(event.event_type, ()))
        logger.debug(
            "Event published",
            extra={
                "event_type": event.event_type,
                "event_id": event.event_id,
                "subscribers": len(handlers),
            },
        )
        for handler in handlers:
            handler(event)
        return len(handlers)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))
