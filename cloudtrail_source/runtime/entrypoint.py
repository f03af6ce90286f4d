from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from cloudtrail_source.core.domain.fields import FieldId, field_id_by_name
from cloudtrail_source.core.events.event_bus import EventBus
from cloudtrail_source.core.events.events import FileOpenedEvent
from cloudtrail_source.core.events.sinks.file_recorder import FileRecorderSink
from cloudtrail_source.core.events.sinks.sink_logging import LoggingEventSink
from cloudtrail_source.plugin.return_codes import ReturnCode
from cloudtrail_source.plugin.source_plugin import CloudTrailFileSourcePlugin
from cloudtrail_source.runtime.prometheus_metrics import SourceMetricsClient

LOGGER = logging.getLogger(__name__)

ABSENT = "<absent>"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _RunStatsSink:
    """Counts files opened during the run."""

    def __init__(self) -> None:
        self.files_opened = 0

    def on_event(self, event: Any) -> None:
        if isinstance(event, FileOpenedEvent):
            self.files_opened += 1


def _parse_field_names(raw: str | None) -> list[FieldId]:
    if not raw:
        return []
    ids: list[FieldId] = []
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            ids.append(field_id_by_name(name))
        except KeyError:
            raise argparse.ArgumentTypeError(f"unknown field: {name}") from None
    return ids


def _view_text(view: memoryview | None) -> str | None:
    # Views are NUL-terminated and reused by the next call; copy out now.
    if view is None:
        return None
    return bytes(view[:-1]).decode("utf-8", errors="replace")


def _format_event(
    plugin: CloudTrailFileSourcePlugin,
    *,
    evtnum: int,
    data: bytes,
    ts_ns: int,
    render: bool,
    field_ids: list[FieldId],
) -> str:
    if render:
        return f"{ts_ns} {_view_text(plugin.event_to_string(data))}"

    if field_ids:
        values = []
        for field_id in field_ids:
            value = _view_text(plugin.extract_str(evtnum, field_id, None, data))
            values.append(value if value is not None else ABSENT)
        return "\t".join([str(ts_ns), *values])

    return data.decode("utf-8")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Read CloudTrail JSON files from a directory and print their records."
    )

    parser.add_argument(
        "--root-dir",
        type=str,
        help="Directory scanned recursively for .json and .json.gz files.",
    )

    parser.add_argument(
        "--render",
        action="store_true",
        help="Print one summary line per record instead of the record JSON.",
    )

    parser.add_argument(
        "--fields",
        type=str,
        default=None,
        help="Comma-separated field names to print (e.g. ct.src,ct.user).",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after this many records.",
    )

    parser.add_argument(
        "--list-fields",
        action="store_true",
        help="Print the extractable field schema as JSON and exit.",
    )

    parser.add_argument(
        "--record-events",
        type=Path,
        default=None,
        help="Append cursor events (files opened, errors, ...) as JSON lines.",
    )

    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.list_fields:
        print(CloudTrailFileSourcePlugin.get_fields())
        return

    if not args.root_dir:
        parser.error("--root-dir is required")

    try:
        field_ids = _parse_field_names(args.fields)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    if args.limit is not None and args.limit < 0:
        parser.error("--limit must be >= 0")

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    stats = _RunStatsSink()
    sinks: list[Any] = [
        LoggingEventSink(logging.getLogger("cloudtrail_source.events")),
        stats,
    ]
    if args.record_events is not None:
        sinks.append(FileRecorderSink(args.record_events))

    plugin = CloudTrailFileSourcePlugin(event_bus=EventBus(sinks=sinks))
    plugin.init(json.dumps({"verbose": args.verbose}))

    # ------------------------------------------------------------------
    # Stream
    # ------------------------------------------------------------------

    failed = False
    emitted = 0

    if plugin.open(args.root_dir) != ReturnCode.SUCCESS:
        print(f"Error: {plugin.get_last_error()}", file=sys.stderr)
        plugin.destroy()
        sys.exit(1)

    try:
        while args.limit is None or emitted < args.limit:
            result = plugin.next()
            if result.rc == ReturnCode.EOF:
                break
            if result.rc != ReturnCode.SUCCESS or result.data is None:
                print(f"Error: {plugin.get_last_error()}", file=sys.stderr)
                failed = True
                break

            data = bytes(result.data[:-1])
            print(
                _format_event(
                    plugin,
                    evtnum=emitted,
                    data=data,
                    ts_ns=result.ts_ns,
                    render=args.render,
                    field_ids=field_ids,
                )
            )
            emitted += 1
    finally:
        plugin.destroy()

    metrics = SourceMetricsClient()
    if metrics.is_enabled():
        metrics.record_run(
            root_dir=args.root_dir,
            files_opened=stats.files_opened,
            records_emitted=emitted,
            failed=failed,
        )
        metrics.push()

    LOGGER.info(
        "Run finished",
        extra={"records_emitted": emitted, "files_opened": stats.files_opened},
    )

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
