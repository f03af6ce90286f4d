"""
Synchronous event bus for cursor observations.
"""
from __future__ import annotations

from typing import Any, Iterable

from cloudtrail_source.core.events.event_sink import EventSink


class EventBus:
    """Fans each event out to the registered sinks, in registration order."""

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    def register(self, sink: EventSink) -> None:
        """Register a new sink."""
        self._sinks.append(sink)

    def emit(self, event: Any) -> None:
        """Deliver an event to all sinks. Events after close() are dropped."""
        if self._closed:
            return
        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        """
        Close every sink that exposes a close() method. Idempotent.
        """
        if self._closed:
            return

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

        self._closed = True
