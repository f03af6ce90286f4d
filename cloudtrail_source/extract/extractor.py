"""Field extraction and actor resolution for CloudTrail records.

Lookups never raise: a missing field is reported as None (absent) so that
partial records never stop the stream.
"""

from __future__ import annotations

import json
from typing import Any

from cloudtrail_source.core.domain.errors import RecordDecodeError
from cloudtrail_source.core.domain.fields import FieldId
from cloudtrail_source.extract.path_lookup import as_text, lookup_path, lookup_text

AWS_DOMAIN_SUFFIX = ".amazonaws.com"
NOT_AVAILABLE = "<NA>"
UNKNOWN_USER_TYPE = "<unknown user type>"


def decode_record(data: bytes | bytearray | memoryview | str) -> dict[str, Any]:
    """Decode record bytes handed back by the host.

    A trailing NUL terminator is tolerated. Raises RecordDecodeError when
    the payload is not a JSON object.
    """
    if isinstance(data, str):
        text = data
    else:
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RecordDecodeError(str(exc)) from exc
    text = text.split("\x00", 1)[0]

    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordDecodeError(str(exc)) from exc

    if not isinstance(record, dict):
        raise RecordDecodeError(
            f"expected a JSON object, got {type(record).__name__}"
        )
    return record


def strip_aws_suffix(source: str) -> str:
    """``s3.amazonaws.com`` -> ``s3``. The bare suffix is left untouched."""
    if len(source) > len(AWS_DOMAIN_SUFFIX) and source.endswith(AWS_DOMAIN_SUFFIX):
        return source[: -len(AWS_DOMAIN_SUFFIX)]
    return source


def _field_text(record: dict[str, Any], key: str) -> str:
    # Always-present fields: a missing key renders as JSON null.
    return as_text(record.get(key))


def extract(record: dict[str, Any], field_id: int) -> str | None:
    """Return the string value of field_id, or None when absent.

    Unknown ids return the NOT_AVAILABLE marker instead of failing.
    """
    try:
        fid = FieldId(field_id)
    except ValueError:
        return NOT_AVAILABLE

    if fid is FieldId.SRC:
        return strip_aws_suffix(_field_text(record, "eventSource"))
    if fid is FieldId.NAME:
        return _field_text(record, "eventName")
    if fid is FieldId.USER:
        return lookup_text(record, "userIdentity", "userName")
    if fid is FieldId.REGION:
        return _field_text(record, "awsRegion")
    if fid is FieldId.BUCKETNAME:
        return lookup_text(record, "requestParameters", "bucketName")
    return NOT_AVAILABLE


def derive_actor(record: dict[str, Any]) -> str:
    """Resolve who performed the action, per userIdentity.type.

    - Root / IAMUser: userName, else ""
    - AWSService: invokedBy, else ""
    - AssumedRole: sessionContext.sessionIssuer.userName, else "AssumedRole"
    - AWSAccount / FederatedUser: the type itself
    - any other or missing type: UNKNOWN_USER_TYPE
    - no userIdentity object: ""
    """
    identity = lookup_path(record, "userIdentity")
    if not isinstance(identity, dict):
        return ""

    user_type = identity.get("type")

    if user_type in ("Root", "IAMUser"):
        return lookup_text(identity, "userName") or ""
    if user_type == "AWSService":
        return lookup_text(identity, "invokedBy") or ""
    if user_type == "AssumedRole":
        issuer = lookup_text(identity, "sessionContext", "sessionIssuer", "userName")
        return issuer if issuer is not None else "AssumedRole"
    if user_type in ("AWSAccount", "FederatedUser"):
        return user_type
    return UNKNOWN_USER_TYPE
