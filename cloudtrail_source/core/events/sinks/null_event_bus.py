from __future__ import annotations

from typing import Any

from cloudtrail_source.core.events.event_bus import EventBus


class _NullSink:
    """Sink that drops every event."""

    def on_event(self, event: Any) -> None:
        return


class NullEventBus(EventBus):
    """EventBus for cursors nobody observes (default, and tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=[_NullSink()])
