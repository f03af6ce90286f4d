"""
Logging event sink.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any


class LoggingEventSink:
    """Logs cursor events; errors at WARNING, everything else at DEBUG."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        name = type(event).__name__
        fields = asdict(event) if is_dataclass(event) else {"event": str(event)}
        level = logging.WARNING if name == "SourceErrorEvent" else logging.DEBUG
        self._logger.log(level, name, extra={"source_event": fields})
