"""Field schema exposed to the host.

The host queries this table once and resolves field names to ids itself;
ids are therefore part of the wire contract and must never be renumbered.
"""

from __future__ import annotations

import json
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from cloudtrail_source.core.domain.types import FieldInfo

FIELD_SCHEMA_VERSION = "1.0"


class FieldId(IntEnum):
    SRC = 0
    NAME = 1
    USER = 2
    REGION = 3
    BUCKETNAME = 4


FIELD_SCHEMA: Mapping[FieldId, FieldInfo] = MappingProxyType(
    {
        FieldId.SRC: FieldInfo(
            name="ct.src",
            desc=(
                "the source of the cloudtrail event (eventSource in the json, "
                "without the '.amazonaws.com' trailer)."
            ),
        ),
        FieldId.NAME: FieldInfo(
            name="ct.name",
            desc="the name of the cloudtrail event (eventName in the json).",
        ),
        FieldId.USER: FieldInfo(
            name="ct.user",
            desc="the user of the cloudtrail event (userIdentity.userName in the json).",
        ),
        FieldId.REGION: FieldInfo(
            name="ct.region",
            desc="the region of the cloudtrail event (awsRegion in the json).",
        ),
        FieldId.BUCKETNAME: FieldInfo(
            name="ct.bucketname",
            desc="the bucket name of s3 events (requestParameters.bucketName in the json).",
        ),
    }
)


def field_id_by_name(name: str) -> FieldId:
    """Resolve a schema field name (e.g. ``ct.user``) to its id."""
    for field_id, info in FIELD_SCHEMA.items():
        if info.name == name:
            return field_id
    raise KeyError(name)


def fields_as_json() -> str:
    """Serialize the schema in id order, the shape the host expects."""
    entries = [
        FIELD_SCHEMA[field_id].model_dump(mode="json")
        for field_id in sorted(FIELD_SCHEMA)
    ]
    return json.dumps(entries)
