"""One-line rendering of CloudTrail records."""

from __future__ import annotations

from typing import Any

from cloudtrail_source.core.domain.errors import RecordDecodeError
from cloudtrail_source.core.domain.fields import FieldId
from cloudtrail_source.extract.extractor import decode_record, derive_actor, extract

NO_ACTOR = "<NAZ>"


def render(record: dict[str, Any]) -> str:
    actor = derive_actor(record) or NO_ACTOR
    return (
        f"[cloudtrail] src:{extract(record, FieldId.SRC)}"
        f" name:{extract(record, FieldId.NAME)}"
        f" user:{actor}"
        f" reg:{extract(record, FieldId.REGION)}"
    )


def invalid_json_line(exc: Exception) -> str:
    return f"<invalid JSON: {exc}>"


def render_bytes(data: bytes | bytearray | memoryview | str) -> str:
    """Render record bytes; undecodable input yields a diagnostic line."""
    try:
        record = decode_record(data)
    except RecordDecodeError as exc:
        return invalid_json_line(exc)
    return render(record)
