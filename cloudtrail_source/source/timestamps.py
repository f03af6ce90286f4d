"""RFC3339 eventTime parsing."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

from cloudtrail_source.core.domain.errors import TimestampError

NS_PER_SECOND = 1_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RE_RFC3339 = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.\d+)?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def parse_rfc3339(raw: Any) -> datetime:
    """Parse an RFC3339 timestamp into an aware datetime.

    Fractional seconds are accepted and dropped. Anything that is not a
    string in RFC3339 form raises TimestampError carrying the raw value.
    """
    if not isinstance(raw, str):
        raise TimestampError(raw)

    # fullmatch: "$" would also accept a trailing newline.
    match = _RE_RFC3339.fullmatch(raw)
    if match is None:
        raise TimestampError(raw)

    tz_text = match.group("tz")
    if tz_text == "Z":
        tz = timezone.utc
    else:
        sign = -1 if tz_text[0] == "-" else 1
        hours, minutes = int(tz_text[1:3]), int(tz_text[4:6])
        if hours > 23 or minutes > 59:
            raise TimestampError(raw)
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            tzinfo=tz,
        )
    except ValueError as exc:
        raise TimestampError(raw) from exc


def event_time_ns(raw: Any) -> int:
    """Whole seconds since the Unix epoch, scaled to nanoseconds."""
    seconds = (parse_rfc3339(raw) - _EPOCH) // timedelta(seconds=1)
    return seconds * NS_PER_SECOND
