"""Container decoding: gunzip, parse, and unwrap batched records."""

from __future__ import annotations

import gzip
import json
import math
import zlib

from cloudtrail_source.core.domain.errors import DecompressError, ParseError
from cloudtrail_source.core.domain.types import RecordBatch

RECORDS_KEY = "Records"


def decompress(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressError(f"gzip decompression failed: {exc}") from exc


def _reject_constant(name: str) -> None:
    # json accepts NaN / Infinity, which are not JSON.
    raise ParseError(f"invalid JSON container: unexpected literal {name}")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ParseError(f"invalid JSON container: number out of range {text}")
    return value


def decode_container(data: bytes, is_compressed: bool) -> RecordBatch:
    """Decode one container into its ordered batch of records.

    Two shapes are recognized:
    - ``{"Records": [...]}`` (exactly one key): the batch is the array.
    - anything else: the parsed value is a batch of one, even when it is
      not an object. Consumers must tolerate non-object records.

    Raises:
        DecompressError: is_compressed is set and the bytes are not gzip.
        ParseError: the (decompressed) bytes are not valid JSON.
    """
    if is_compressed:
        data = decompress(data)

    try:
        doc = json.loads(
            data,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"invalid JSON container: {exc}") from exc

    if (
        isinstance(doc, dict)
        and len(doc) == 1
        and isinstance(doc.get(RECORDS_KEY), list)
    ):
        return tuple(doc[RECORDS_KEY])

    return (doc,)
