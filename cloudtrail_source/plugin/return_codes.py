"""Return codes shared with the host's capture framework."""

from __future__ import annotations

from enum import IntEnum


class ReturnCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    TIMEOUT = -1
    EOF = 6
