"""Public API for the cloudtrail_source package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Host-facing plugin
# ----------------------------------------------------------------------
from cloudtrail_source.plugin.return_codes import ReturnCode
from cloudtrail_source.plugin.source_plugin import (
    CloudTrailFileSourcePlugin,
    NextResult,
)

# ----------------------------------------------------------------------
# Record source
# ----------------------------------------------------------------------
from cloudtrail_source.source.catalog import build_catalog
from cloudtrail_source.source.cursor import RecordCursor
from cloudtrail_source.source.decoder import decode_container

# ----------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------
from cloudtrail_source.extract.extractor import decode_record, derive_actor, extract
from cloudtrail_source.extract.renderer import render, render_bytes

# ----------------------------------------------------------------------
# Domain types, schema and errors
# ----------------------------------------------------------------------
from cloudtrail_source.core.domain.errors import (
    CloudTrailSourceError,
    ConfigError,
    DecompressError,
    ParseError,
    RecordDecodeError,
    RecordTooLargeError,
    SourceIOError,
    TimestampError,
)
from cloudtrail_source.core.domain.fields import FIELD_SCHEMA, FieldId
from cloudtrail_source.core.domain.types import FieldInfo, FileEntry, SourceEvent

# ----------------------------------------------------------------------
# Config
# ----------------------------------------------------------------------
from cloudtrail_source.config.open_params import OpenParams
from cloudtrail_source.config.plugin_config import PluginConfig

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Plugin
    "CloudTrailFileSourcePlugin",
    "NextResult",
    "ReturnCode",

    # Source
    "build_catalog",
    "decode_container",
    "RecordCursor",

    # Extraction
    "decode_record",
    "extract",
    "derive_actor",
    "render",
    "render_bytes",

    # Domain
    "FileEntry",
    "SourceEvent",
    "FieldInfo",
    "FieldId",
    "FIELD_SCHEMA",

    # Errors
    "CloudTrailSourceError",
    "ConfigError",
    "SourceIOError",
    "DecompressError",
    "ParseError",
    "TimestampError",
    "RecordTooLargeError",
    "RecordDecodeError",

    # Config
    "PluginConfig",
    "OpenParams",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("cloudtrail-source")
except PackageNotFoundError:
    __version__ = "0.0.0"
