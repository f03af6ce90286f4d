"""
Event sink interface.

Sinks consume the domain events a record cursor emits while it walks
its catalog.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a source event."""
