"""Tracker implementation for recording TraceEvents."""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..models import TraceEvent

DEFAULT_CAPACITY = 1000


class ITracker(Protocol):
    """Records TraceEvents for the observability API."""

    def track(self, event_type: str, actor: str, data: dict) -> TraceEvent:
        """Create and keep a TraceEvent."""
        ...

    def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, oldest first."""
        ...


class Tracker:
    """Bounded in-memory trace log.

    ``track`` is synchronous so that recording an event never yields to the
    event loop in the middle of a state transition.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._events: deque[TraceEvent] = deque(maxlen=capacity)

    def track(self, event_type: str, actor: str, data: dict) -> TraceEvent:
        """Create TraceEvent and append it to the log."""
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        self._events.append(trace_event)
        return trace_event

    def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, oldest first."""
        events = [
            e
            for e in self._events
            if (after is None or e.timestamp > after)
            and (not event_types or e.event_type in event_types)
            and (actor is None or e.actor == actor)
        ]
        return events[:limit]

    def clear(self) -> None:
        self._events.clear()
