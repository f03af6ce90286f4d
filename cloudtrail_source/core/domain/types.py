"""Core data models for the CloudTrail file source.

Internal values that never cross the host boundary (file entries, delivered
events) are plain frozen dataclasses. Models that are serialized for the host
(the field schema entries) are Pydantic models so their JSON shape is checked
against ``core/schemas``.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# A decoded container: one entry per record, in file order.
RecordBatch = tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A CloudTrail container discovered under the configured root."""

    path: str
    is_compressed: bool


@dataclass(frozen=True, slots=True)
class SourceEvent:
    """One delivered record.

    data is the canonical JSON encoding of the record (no NUL terminator);
    ts_ns is the eventTime in whole seconds, expressed in nanoseconds.
    """

    data: bytes
    ts_ns: int


# ---------------------------------------------------------------------------
# Host-facing models
# ---------------------------------------------------------------------------


class FieldInfo(BaseModel):
    type: Literal["string"] = "string"
    name: str = Field(..., min_length=1)
    desc: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)
