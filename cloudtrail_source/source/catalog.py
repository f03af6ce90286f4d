"""Discovery of CloudTrail containers under a root directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cloudtrail_source.core.domain.errors import ConfigError, SourceIOError
from cloudtrail_source.core.domain.metadata import PLUGIN_NAME
from cloudtrail_source.core.domain.types import FileEntry

LOGGER = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".json.gz"
PLAIN_SUFFIX = ".json"


def classify(path: str) -> FileEntry | None:
    """Return a FileEntry for a container path, or None if it is not one."""
    if path.endswith(COMPRESSED_SUFFIX):
        return FileEntry(path=path, is_compressed=True)
    if path.endswith(PLAIN_SUFFIX):
        return FileEntry(path=path, is_compressed=False)
    return None


def _raise_walk_error(exc: OSError) -> None:
    raise SourceIOError(str(exc), path=exc.filename) from exc


def build_catalog(root_dir: str | Path) -> tuple[FileEntry, ...]:
    """Recursively list every ``.json`` / ``.json.gz`` file under root_dir.

    The result is sorted by path so the delivery order does not depend on
    the filesystem's directory order.

    Raises:
        ConfigError: root_dir does not exist, is not a directory, or holds
            no container files.
        SourceIOError: a directory could not be listed during the walk.
    """
    root = Path(root_dir)
    if not root.exists():
        raise ConfigError(f"{PLUGIN_NAME} plugin error: {root} does not exist")
    if not root.is_dir():
        raise ConfigError(f"{PLUGIN_NAME} plugin error: {root} is not a directory")

    LOGGER.info("Scanning directory", extra={"root_dir": str(root)})

    entries: list[FileEntry] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            entry = classify(path)
            if entry is None:
                continue
            # Skips sockets, fifos and dangling links.
            if not os.path.isfile(path):
                continue
            entries.append(entry)

    if not entries:
        raise ConfigError(f"{PLUGIN_NAME} plugin error: no json files found in {root}")

    entries.sort(key=lambda e: e.path)

    LOGGER.info(
        "Found json files",
        extra={"root_dir": str(root), "file_count": len(entries)},
    )
    return tuple(entries)
