from __future__ import annotations

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from depfilter.filters import PathFilter
from depfilter.models import FileRecord, Snapshot

if TYPE_CHECKING:
    from rich.console import Console


logger = logging.getLogger(__name__)


def _on_walk_error(exc: OSError) -> None:
    logger.warning("Failed to walk folder %r: %s", exc.filename, exc.strerror or exc)


def _record_for(root: Path, directory: str, filename: str) -> FileRecord | None:
    file_path = Path(directory) / filename
    try:
        info = file_path.stat()
    except OSError as exc:
        logger.warning("Failed to get info for %r: %s", str(file_path), exc.strerror or exc)
        return None
    if not stat.S_ISREG(info.st_mode):
        return None

    relative_dir = Path(directory).relative_to(root).as_posix()
    return FileRecord(
        name=filename,
        relative_path="" if relative_dir == "." else relative_dir,
        size=info.st_size,
        last_modified=datetime.fromtimestamp(info.st_mtime, tz=timezone.utc),
    )


def walk_tree(root: Path, path_filter: PathFilter | None = None) -> Snapshot:
    root = root.resolve()
    path_filter = path_filter or PathFilter()
    records: list[FileRecord] = []

    for directory, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            record = _record_for(root, directory, filename)
            if record is None:
                continue
            if not path_filter.matches(record.key):
                logger.debug("Skipping %s", record.key)
                continue
            records.append(record)

    records.sort(key=lambda r: PurePosixPath(r.key).parts)
    logger.debug("Walked %s: %d file(s)", root, len(records))
    return Snapshot(tuple(records))


def walk_tree_with_status(
    root: Path,
    path_filter: PathFilter | None = None,
    *,
    console: "Console | None" = None,
) -> Snapshot:
    if console is None:
        return walk_tree(root, path_filter)
    with console.status(f"Walking {root} ..."):
        return walk_tree(root, path_filter)
