"""
Events Package.

In-process event bus and event schemas. The only event today is
SessionEnded: published by the session manager, consumed by the
application controller.
"""

from notu.events.bus import EventBus
from notu.events.schemas import SESSION_ENDED, EventEnvelope, SessionEnded

__all__ = ["EventBus", "EventEnvelope", "SESSION_ENDED", "SessionEnded"]
