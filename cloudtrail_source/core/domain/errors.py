"""Error taxonomy for the CloudTrail file source.

Every failure raised by the catalog, decoder and cursor derives from
CloudTrailSourceError so the host boundary can map them to a single
failure return code while keeping the message as the last error.
"""

from __future__ import annotations

from typing import Any


class CloudTrailSourceError(Exception):
    """Base class for all source failures."""


class ConfigError(CloudTrailSourceError):
    """Bad or missing configuration; the stream cannot start."""


class SourceIOError(CloudTrailSourceError):
    """A file could not be enumerated or read."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class DecompressError(CloudTrailSourceError):
    """A compressed container could not be gunzipped."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(CloudTrailSourceError):
    """A container is not valid JSON."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class TimestampError(CloudTrailSourceError):
    """A record's eventTime is missing or not RFC3339."""

    def __init__(self, raw_value: Any) -> None:
        super().__init__(f"time in unknown format: {raw_value!r}")
        self.raw_value = raw_value


class RecordTooLargeError(CloudTrailSourceError):
    """A re-encoded record does not fit the event buffer."""

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            f"cloudtrail message too long: {size}, max {max_size} supported"
        )
        self.size = size
        self.max_size = max_size


class RecordDecodeError(CloudTrailSourceError):
    """Record bytes handed back by the host are not a JSON object."""
