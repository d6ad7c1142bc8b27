"""Unit tests for the in-process event bus and event schemas."""

import pytest

from notu.events.bus import EventBus
from notu.events.schemas import SESSION_ENDED, EventEnvelope, SessionEnded


class TestEventSchemas:
    def test_session_ended_defaults(self):
        event = SessionEnded(source="session-manager", payload={"reason": "refresh_failed"})
        assert event.event_type == SESSION_ENDED
        assert event.event_version == 1
        assert event.event_id
        assert event.payload["reason"] == "refresh_failed"

    def test_event_ids_are_unique(self):
        assert SessionEnded(source="a").event_id != SessionEnded(source="a").event_id


class TestEventBus:
    def test_publish_reaches_subscribers_in_order(self, bus: EventBus):
        seen: list[str] = []
        bus.subscribe(SESSION_ENDED, lambda e: seen.append("first"))
        bus.subscribe(SESSION_ENDED, lambda e: seen.append("second"))

        assert bus.publish(SessionEnded(source="test")) == 2
        assert seen == ["first", "second"]

    def test_other_event_types_not_delivered(self, bus: EventBus):
        seen: list[EventEnvelope] = []
        bus.subscribe("notes.note.created", seen.append)

        assert bus.publish(SessionEnded(source="test")) == 0
        assert seen == []

    def test_unsubscribe(self, bus: EventBus):
        seen: list[EventEnvelope] = []
        unsubscribe = bus.subscribe(SESSION_ENDED, seen.append)
        unsubscribe()
        unsubscribe()

        bus.publish(SessionEnded(source="test"))
        assert seen == []
        assert bus.subscriber_count(SESSION_ENDED) == 0

    def test_handler_errors_propagate(self, bus: EventBus):
        def broken(event: EventEnvelope) -> None:
            raise RuntimeError("handler failed")

        bus.subscribe(SESSION_ENDED, broken)
        with pytest.raises(RuntimeError):
            bus.publish(SessionEnded(source="test"))

    def test_buses_are_independent(self):
        first, second = EventBus(), EventBus()
        first.subscribe(SESSION_ENDED, lambda e: None)
        assert second.subscriber_count(SESSION_ENDED) == 0
