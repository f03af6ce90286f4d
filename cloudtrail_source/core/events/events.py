"""
Domain event models.

These events describe what a record cursor observed while walking its
catalog. They are consumed by loggers and recorders; nothing in the
stream's control flow depends on them.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class FileOpenedEvent:
    path: str
    file_index: int
    is_compressed: bool
    size_bytes: int


@dataclass(slots=True)
class BatchDecodedEvent:
    path: str
    file_index: int
    record_count: int


@dataclass(slots=True)
class StreamEndedEvent:
    files_consumed: int
    records_emitted: int


@dataclass(slots=True)
class SourceErrorEvent:
    error_type: str
    message: str
    path: str | None
