"""Per-plugin and per-stream state.

The host sees payloads only as borrowed views into buffers owned here.
A view stays valid until the next call that writes the same buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cloudtrail_source.config.open_params import OpenParams
from cloudtrail_source.config.plugin_config import PluginConfig
from cloudtrail_source.core.events.event_bus import EventBus
from cloudtrail_source.source.cursor import RecordCursor


class HostBuffer:
    """Fixed-capacity byte buffer handed to the host as NUL-terminated views."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._buf = bytearray(capacity)
        self._view = memoryview(self._buf)

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def write(self, payload: bytes) -> memoryview:
        """Copy payload plus a NUL terminator. The payload must fit."""
        size = len(payload) + 1
        if size > len(self._buf):
            raise ValueError(
                f"payload of {len(payload)} bytes does not fit buffer of {len(self._buf)}"
            )
        self._buf[: len(payload)] = payload
        self._buf[len(payload)] = 0
        return self._view[:size]

    def write_truncated(self, payload: bytes) -> memoryview:
        """Like write(), but cuts the payload to the buffer's capacity."""
        return self.write(payload[: len(self._buf) - 1])


@dataclass(slots=True)
class PluginContext:
    """State created by init() and dropped by destroy()."""

    config: PluginConfig
    event_buf: HostBuffer
    out_buf: HostBuffer
    last_error: str = ""

    @classmethod
    def create(cls, config: PluginConfig) -> PluginContext:
        return cls(
            config=config,
            # One extra byte for the NUL terminator.
            event_buf=HostBuffer(config.max_record_bytes + 1),
            out_buf=HostBuffer(config.out_buf_len),
        )


@dataclass(slots=True)
class OpenContext:
    """State created by open() for one event stream."""

    params: OpenParams
    cursor: RecordCursor
    event_bus: EventBus
    # Injected buses outlive the stream and are closed by destroy().
    owns_event_bus: bool = True
    closed: bool = field(default=False)
