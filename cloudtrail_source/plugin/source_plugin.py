"""Host-facing CloudTrail file source plugin.

This is the only layer that speaks the host's calling convention: integer
return codes, a last-error string, and NUL-terminated payloads living in
plugin-owned buffers. Everything below it raises CloudTrailSourceError
subclasses and works on owned Python values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cloudtrail_source.config.open_params import OpenParams
from cloudtrail_source.config.plugin_config import PluginConfig
from cloudtrail_source.core.domain.errors import CloudTrailSourceError, RecordDecodeError
from cloudtrail_source.core.domain.fields import fields_as_json
from cloudtrail_source.core.domain.metadata import (
    PLUGIN_DESCRIPTION,
    PLUGIN_ID,
    PLUGIN_NAME,
    TYPE_SOURCE_PLUGIN,
)
from cloudtrail_source.core.events.event_bus import EventBus
from cloudtrail_source.core.events.sinks.sink_logging import LoggingEventSink
from cloudtrail_source.extract.extractor import decode_record, extract
from cloudtrail_source.extract.renderer import invalid_json_line, render
from cloudtrail_source.plugin.context import OpenContext, PluginContext
from cloudtrail_source.plugin.return_codes import ReturnCode
from cloudtrail_source.source.catalog import build_catalog
from cloudtrail_source.source.cursor import RecordCursor

LOGGER = logging.getLogger(__name__)

PACKAGE_LOGGER = "cloudtrail_source"


@dataclass(frozen=True, slots=True)
class NextResult:
    """Outcome of next().

    data is a borrowed view of the event buffer (JSON + NUL) and is only
    valid until the following next() call.
    """

    rc: ReturnCode
    data: memoryview | None = None
    ts_ns: int = 0


class CloudTrailFileSourcePlugin:
    """Source plugin reading CloudTrail JSON files from a directory.

    Lifecycle: init() -> open() -> next()* -> close() -> destroy().
    Each instance holds its own context, so several streams can coexist
    as long as each is driven by a single caller.
    """

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._ctx: PluginContext | None = None
        self._open: OpenContext | None = None
        self._event_bus = event_bus
        self._last_error = ""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @staticmethod
    def get_type() -> int:
        return TYPE_SOURCE_PLUGIN

    @staticmethod
    def get_id() -> int:
        return PLUGIN_ID

    @staticmethod
    def get_name() -> str:
        return PLUGIN_NAME

    @staticmethod
    def get_description() -> str:
        return PLUGIN_DESCRIPTION

    @staticmethod
    def get_fields() -> str:
        """JSON array of {type, name, desc}, in field id order."""
        return fields_as_json()

    def get_last_error(self) -> str:
        return self._ctx.last_error if self._ctx is not None else self._last_error

    def _set_last_error(self, message: str) -> None:
        self._last_error = message
        if self._ctx is not None:
            self._ctx.last_error = message

    # ------------------------------------------------------------------
    # Plugin lifecycle
    # ------------------------------------------------------------------

    def init(self, config: str = "") -> ReturnCode:
        try:
            plugin_cfg = PluginConfig.from_config_string(config)
        except CloudTrailSourceError as exc:
            self._set_last_error(str(exc))
            return ReturnCode.FAILURE

        logging.getLogger(PACKAGE_LOGGER).setLevel(
            logging.DEBUG if plugin_cfg.verbose else logging.WARNING
        )

        self._ctx = PluginContext.create(plugin_cfg)
        LOGGER.info("[%s] plugin_init", PLUGIN_NAME, extra={"config": config})
        return ReturnCode.SUCCESS

    def destroy(self) -> None:
        LOGGER.info("[%s] plugin_destroy", PLUGIN_NAME)
        self.close()
        if self._event_bus is not None:
            self._event_bus.close()
        self._ctx = None

    def _require_ctx(self) -> PluginContext | None:
        """The init() context, or None with the last error set."""
        if self._ctx is None:
            self._set_last_error(f"{PLUGIN_NAME} plugin error: plugin not initialised")
        return self._ctx

    # ------------------------------------------------------------------
    # Stream lifecycle
    # ------------------------------------------------------------------

    def open(self, params: str) -> ReturnCode:
        LOGGER.info("[%s] plugin_open", PLUGIN_NAME)
        self.close()
        ctx = self._require_ctx()
        if ctx is None:
            return ReturnCode.FAILURE

        try:
            open_params = OpenParams.from_params(params)
            files = build_catalog(open_params.root_dir)
        except CloudTrailSourceError as exc:
            self._set_last_error(str(exc))
            return ReturnCode.FAILURE

        if self._event_bus is not None:
            event_bus, owns_event_bus = self._event_bus, False
        else:
            event_bus = EventBus(
                sinks=[LoggingEventSink(logging.getLogger(f"{PACKAGE_LOGGER}.events"))]
            )
            owns_event_bus = True

        cursor = RecordCursor(
            files,
            max_record_bytes=ctx.config.max_record_bytes,
            event_bus=event_bus,
        )
        self._open = OpenContext(
            params=open_params,
            cursor=cursor,
            event_bus=event_bus,
            owns_event_bus=owns_event_bus,
        )
        return ReturnCode.SUCCESS

    def next(self) -> NextResult:
        ctx = self._require_ctx()
        if ctx is None:
            return NextResult(rc=ReturnCode.FAILURE)
        if self._open is None or self._open.closed:
            self._set_last_error(f"{PLUGIN_NAME} plugin error: stream is not open")
            return NextResult(rc=ReturnCode.FAILURE)

        try:
            event = self._open.cursor.next()
        except CloudTrailSourceError as exc:
            self._set_last_error(str(exc))
            return NextResult(rc=ReturnCode.FAILURE)

        if event is None:
            return NextResult(rc=ReturnCode.EOF)

        data = ctx.event_buf.write(event.data)
        return NextResult(rc=ReturnCode.SUCCESS, data=data, ts_ns=event.ts_ns)

    def close(self) -> None:
        if self._open is None or self._open.closed:
            return
        LOGGER.info("[%s] plugin_close", PLUGIN_NAME)
        if self._open.owns_event_bus:
            self._open.event_bus.close()
        self._open.closed = True

    # ------------------------------------------------------------------
    # Record inspection
    # ------------------------------------------------------------------

    def event_to_string(self, data: bytes | bytearray | memoryview) -> memoryview | None:
        """Render a record as one line; bad input yields a diagnostic line.

        None only when the plugin is not initialised.
        """
        ctx = self._require_ctx()
        if ctx is None:
            return None
        try:
            line = render(decode_record(data))
        except RecordDecodeError as exc:
            self._set_last_error(str(exc))
            line = invalid_json_line(exc)
        return ctx.out_buf.write_truncated(line.encode("utf-8"))

    def extract_str(
        self,
        evtnum: int,
        field_id: int,
        arg: str | None,
        data: bytes | bytearray | memoryview,
    ) -> memoryview | None:
        """Extract one field from a record; None means the field is absent.

        evtnum and arg are part of the host contract and unused here.
        """
        del evtnum, arg
        ctx = self._require_ctx()
        if ctx is None:
            return None
        try:
            record = decode_record(data)
        except RecordDecodeError:
            return None

        value = extract(record, field_id)
        if value is None:
            return None
        return ctx.out_buf.write_truncated(value.encode("utf-8"))
