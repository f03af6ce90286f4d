"""
Semantic test: host-facing lifecycle.

Invariant:
open() validates the directory and reports failures through return codes
and the last error; next() hands out NUL-terminated JSON with a ns
timestamp until EOF, which repeats; close() is idempotent. Calls before
init() fail. An injected event bus lives until destroy(), so it keeps
receiving events across reopened streams.
"""

from __future__ import annotations

import json

from cloudtrail_source.core.domain.metadata import (
    PLUGIN_DESCRIPTION,
    PLUGIN_ID,
    PLUGIN_NAME,
    TYPE_SOURCE_PLUGIN,
)
from cloudtrail_source.core.events.event_bus import EventBus
from cloudtrail_source.core.events.events import FileOpenedEvent
from cloudtrail_source.core.events.sinks.null_event_bus import NullEventBus
from cloudtrail_source.plugin.return_codes import ReturnCode
from cloudtrail_source.plugin.source_plugin import CloudTrailFileSourcePlugin

EXAMPLE = {
    "eventTime": "2023-01-01T00:00:00Z",
    "eventSource": "s3.amazonaws.com",
    "eventName": "GetObject",
    "awsRegion": "us-east-1",
    "userIdentity": {"type": "IAMUser", "userName": "alice"},
}


def make_plugin() -> CloudTrailFileSourcePlugin:
    plugin = CloudTrailFileSourcePlugin(event_bus=NullEventBus())
    assert plugin.init("") == ReturnCode.SUCCESS
    return plugin


def test_metadata() -> None:
    plugin = CloudTrailFileSourcePlugin()

    assert plugin.get_type() == TYPE_SOURCE_PLUGIN == 1
    assert plugin.get_id() == PLUGIN_ID == 2
    assert plugin.get_name() == PLUGIN_NAME == "cloudtrail_file"
    assert plugin.get_description() == PLUGIN_DESCRIPTION
    names = [f["name"] for f in json.loads(plugin.get_fields())]
    assert names == ["ct.src", "ct.name", "ct.user", "ct.region", "ct.bucketname"]


def test_empty_open_params_fail() -> None:
    plugin = make_plugin()

    assert plugin.open("") == ReturnCode.FAILURE
    assert plugin.get_last_error() == (
        "cloudtrail_file plugin error: missing input directory argument"
    )


def test_open_without_json_files_fails(tmp_path) -> None:
    (tmp_path / "readme.txt").write_text("x", encoding="utf-8")
    plugin = make_plugin()

    assert plugin.open(str(tmp_path)) == ReturnCode.FAILURE
    assert "no json files found" in plugin.get_last_error()


def test_next_before_open_fails() -> None:
    plugin = make_plugin()

    result = plugin.next()

    assert result.rc == ReturnCode.FAILURE
    assert result.data is None
    assert "not open" in plugin.get_last_error()


def test_stream_until_eof(tmp_path) -> None:
    second = dict(EXAMPLE, eventName="PutObject", eventTime="2023-01-01T00:00:05Z")
    (tmp_path / "batch.json").write_text(
        json.dumps({"Records": [EXAMPLE, second]}), encoding="utf-8"
    )
    plugin = make_plugin()
    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS

    first = plugin.next()
    assert first.rc == ReturnCode.SUCCESS
    assert first.ts_ns == 1672531200000000000
    assert first.data is not None
    raw = bytes(first.data)
    assert raw.endswith(b"\x00")
    assert json.loads(raw[:-1]) == EXAMPLE

    nxt = plugin.next()
    assert nxt.rc == ReturnCode.SUCCESS
    assert nxt.ts_ns == 1672531205000000000

    assert plugin.next().rc == ReturnCode.EOF
    assert plugin.next().rc == ReturnCode.EOF

    plugin.close()
    plugin.close()
    assert plugin.next().rc == ReturnCode.FAILURE


def test_failure_sets_last_error(tmp_path) -> None:
    (tmp_path / "bad.json").write_text(
        json.dumps(dict(EXAMPLE, eventTime="2023/01/01")), encoding="utf-8"
    )
    plugin = make_plugin()
    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS

    result = plugin.next()

    assert result.rc == ReturnCode.FAILURE
    assert plugin.get_last_error() == "time in unknown format: '2023/01/01'"


def test_oversized_record_fails_with_sizes(tmp_path) -> None:
    (tmp_path / "big.json").write_text(
        json.dumps(dict(EXAMPLE, padding="x" * 70000)), encoding="utf-8"
    )
    plugin = make_plugin()
    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS

    result = plugin.next()

    assert result.rc == ReturnCode.FAILURE
    assert result.data is None
    assert "max 65535 supported" in plugin.get_last_error()


def test_configured_record_limit(tmp_path) -> None:
    (tmp_path / "r.json").write_text(json.dumps(EXAMPLE), encoding="utf-8")
    plugin = CloudTrailFileSourcePlugin(event_bus=NullEventBus())
    assert plugin.init(json.dumps({"max_record_bytes": 64})) == ReturnCode.SUCCESS
    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS

    assert plugin.next().rc == ReturnCode.FAILURE
    assert "max 64 supported" in plugin.get_last_error()


def test_bad_init_config_fails() -> None:
    plugin = CloudTrailFileSourcePlugin()

    assert plugin.init("not json") == ReturnCode.FAILURE
    assert plugin.get_last_error().startswith("invalid plugin config")


def test_independent_instances_do_not_share_state(tmp_path) -> None:
    (tmp_path / "r.json").write_text(json.dumps(EXAMPLE), encoding="utf-8")
    a = make_plugin()
    b = make_plugin()

    assert a.open(str(tmp_path)) == ReturnCode.SUCCESS
    assert b.open("") == ReturnCode.FAILURE

    assert a.next().rc == ReturnCode.SUCCESS
    assert a.get_last_error() == ""


def test_open_without_init_fails(tmp_path) -> None:
    (tmp_path / "r.json").write_text(json.dumps(EXAMPLE), encoding="utf-8")
    plugin = CloudTrailFileSourcePlugin(event_bus=NullEventBus())

    assert plugin.open(str(tmp_path)) == ReturnCode.FAILURE
    assert plugin.get_last_error() == "cloudtrail_file plugin error: plugin not initialised"
    assert plugin.next().rc == ReturnCode.FAILURE


class _CollectingSink:
    def __init__(self) -> None:
        self.events: list = []
        self.closed = False

    def on_event(self, event) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True


def test_injected_bus_survives_reopen(tmp_path) -> None:
    (tmp_path / "r.json").write_text(json.dumps(EXAMPLE), encoding="utf-8")
    sink = _CollectingSink()
    plugin = CloudTrailFileSourcePlugin(event_bus=EventBus(sinks=[sink]))
    assert plugin.init("") == ReturnCode.SUCCESS

    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS
    assert plugin.next().rc == ReturnCode.SUCCESS
    plugin.close()
    first_run = [e for e in sink.events if isinstance(e, FileOpenedEvent)]
    assert len(first_run) == 1
    assert not sink.closed

    assert plugin.open(str(tmp_path)) == ReturnCode.SUCCESS
    assert plugin.next().rc == ReturnCode.SUCCESS
    opened = [e for e in sink.events if isinstance(e, FileOpenedEvent)]
    assert len(opened) == 2

    plugin.destroy()
    assert sink.closed
