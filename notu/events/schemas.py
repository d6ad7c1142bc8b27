"""
Event Schemas.

Standardized event envelope and the session lifecycle events carried on
the in-process bus.

Naming convention for event_type: domain.entity.action (dot notation)

Usage:
    from notu.events.schemas import SessionEnded

    event = SessionEnded(source="session-manager", payload={"reason": "refresh_failed"})
"""

from uuid import uuid4

from pydantic import BaseModel, Field

from notu.core.utils import utc_now

SESSION_ENDED = "auth.session.ended"


class EventEnvelope(BaseModel):
    """Base event envelope. All events inherit from this.

    Fields:
        event_id: Unique event identifier (auto-generated UUID)
        event_type: Domain event type in dot notation (e.g. auth.session.ended)
        event_version: Schema version for forward compatibility
        timestamp: ISO 8601 UTC timestamp
        source: Component that published the event
        payload: Event-specific data
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    event_version: int = 1
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    source: str
    payload: dict = Field(default_factory=dict)


class SessionEnded(EventEnvelope):
    """Published when the session can no longer be used.

    payload.reason is one of: refresh_failed, retry_rejected, expired.
    """

    event_type: str = SESSION_ENDED
