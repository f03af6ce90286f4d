"""Pull-based cursor over the records of a file catalog."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from cloudtrail_source.config.plugin_config import MAX_EVENT_BYTES
from cloudtrail_source.core.domain.errors import (
    CloudTrailSourceError,
    ParseError,
    RecordTooLargeError,
    SourceIOError,
)
from cloudtrail_source.core.domain.types import FileEntry, RecordBatch, SourceEvent
from cloudtrail_source.core.events.event_bus import EventBus
from cloudtrail_source.core.events.events import (
    BatchDecodedEvent,
    FileOpenedEvent,
    SourceErrorEvent,
    StreamEndedEvent,
)
from cloudtrail_source.core.events.sinks.null_event_bus import NullEventBus
from cloudtrail_source.source.decoder import decode_container
from cloudtrail_source.source.timestamps import event_time_ns

LOGGER = logging.getLogger(__name__)

EVENT_TIME_KEY = "eventTime"


def encode_record(record: Any) -> bytes:
    """Canonical wire encoding: compact, sorted keys, UTF-8.

    Raises ParseError for values strict JSON cannot carry (NaN, infinities).
    """
    try:
        text = json.dumps(
            record,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except ValueError as exc:
        raise ParseError(f"record is not valid JSON: {exc}") from exc
    return text.encode("utf-8")


def _read_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


class RecordCursor:
    """Delivers the records of a catalog one per next() call.

    Invariants:
    - Records come out in catalog order, then array order within a file.
    - A new file is only read once the current batch is exhausted; empty
      batches are skipped.
    - A failed read leaves the cursor on the same file, so a retry
      re-attempts it. Decode failures are not skipped either.
    - A record whose timestamp or size is rejected is consumed but never
      delivered.
    - Once end-of-stream is reached, every later call returns None.

    Not thread-safe: one cursor per stream, driven by a single caller.
    """

    # pylint: disable=too-many-instance-attributes

    def __init__(
        self,
        files: Sequence[FileEntry],
        *,
        max_record_bytes: int = MAX_EVENT_BYTES,
        event_bus: EventBus | None = None,
        reader: Callable[[str], bytes] = _read_bytes,
    ) -> None:
        self._files: tuple[FileEntry, ...] = tuple(files)
        self._max_record_bytes = max_record_bytes
        self._event_bus = event_bus if event_bus is not None else NullEventBus()
        self._reader = reader

        self._file_index = 0
        self._batch: RecordBatch = ()
        self._batch_index = 0

        self._ended = False
        self._records_emitted = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return self._files

    @property
    def position(self) -> tuple[int, int]:
        """(file_index, batch_index). file_index counts files already loaded."""
        return self._file_index, self._batch_index

    @property
    def records_emitted(self) -> int:
        return self._records_emitted

    @property
    def ended(self) -> bool:
        return self._ended

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def next(self) -> SourceEvent | None:
        """Return the next event, or None at end-of-stream.

        Raises:
            SourceIOError, DecompressError, ParseError: loading the next
                file failed, or a record cannot be re-encoded.
            TimestampError: the record's eventTime is not RFC3339.
            RecordTooLargeError: the encoded record exceeds the maximum.
        """
        try:
            return self._next()
        except CloudTrailSourceError as exc:
            self._event_bus.emit(
                SourceErrorEvent(
                    error_type=type(exc).__name__,
                    message=str(exc),
                    path=getattr(exc, "path", None),
                )
            )
            raise

    def __iter__(self) -> Iterator[SourceEvent]:
        while True:
            event = self.next()
            if event is None:
                return
            yield event

    def _next(self) -> SourceEvent | None:
        if self._ended:
            return None

        while self._batch_index == len(self._batch):
            if self._file_index >= len(self._files):
                self._end_stream()
                return None
            self._load_batch(self._files[self._file_index])

        record = self._batch[self._batch_index]
        self._batch_index += 1

        raw_time = record.get(EVENT_TIME_KEY) if isinstance(record, dict) else None
        ts_ns = event_time_ns(raw_time)

        data = encode_record(record)
        if len(data) > self._max_record_bytes:
            raise RecordTooLargeError(len(data), self._max_record_bytes)

        self._records_emitted += 1
        return SourceEvent(data=data, ts_ns=ts_ns)

    def _load_batch(self, entry: FileEntry) -> None:
        try:
            raw = self._reader(entry.path)
        except OSError as exc:
            raise SourceIOError(str(exc), path=entry.path) from exc

        self._event_bus.emit(
            FileOpenedEvent(
                path=entry.path,
                file_index=self._file_index,
                is_compressed=entry.is_compressed,
                size_bytes=len(raw),
            )
        )

        try:
            batch = decode_container(raw, entry.is_compressed)
        except CloudTrailSourceError as exc:
            # The decoder does not know which file it was given.
            if getattr(exc, "path", None) is None:
                exc.path = entry.path
            raise

        self._event_bus.emit(
            BatchDecodedEvent(
                path=entry.path,
                file_index=self._file_index,
                record_count=len(batch),
            )
        )
        if not batch:
            LOGGER.info("Skipping empty batch", extra={"path": entry.path})

        self._batch = batch
        self._batch_index = 0
        self._file_index += 1

    def _end_stream(self) -> None:
        self._ended = True
        self._batch = ()
        self._batch_index = 0
        self._event_bus.emit(
            StreamEndedEvent(
                files_consumed=self._file_index,
                records_emitted=self._records_emitted,
            )
        )
