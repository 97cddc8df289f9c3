from __future__ import annotations

import logging
import shutil
import zipfile
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterable

from depfilter.models import FileRecord


logger = logging.getLogger(__name__)

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
COPY_CHUNK_SIZE = 1024 * 1024


class ArchiveError(RuntimeError):
    pass


def _zip_timestamp(value: datetime) -> tuple[int, int, int, int, int, int]:
    local = value.astimezone() if value.tzinfo is not None else value
    stamp = (local.year, local.month, local.day, local.hour, local.minute, local.second)
    if stamp < ZIP_EPOCH:
        return ZIP_EPOCH
    return stamp


def _write_entries(root: Path, records: list[FileRecord], destination: Path | BinaryIO) -> int:
    written = 0
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for record in records:
            source = root / Path(*record.archive_name.split("/"))
            try:
                fh = source.open("rb")
            except OSError as exc:
                raise ArchiveError(f"Error opening file: {source}") from exc

            with fh:
                info = zipfile.ZipInfo(record.archive_name, date_time=_zip_timestamp(record.last_modified))
                info.compress_type = zipfile.ZIP_DEFLATED
                info.file_size = record.size
                with zf.open(info, "w") as entry:
                    shutil.copyfileobj(fh, entry, COPY_CHUNK_SIZE)
            written += 1
            logger.debug("Archived %s", record.archive_name)
    return written


def write_archive(
    root: Path,
    selected: Iterable[FileRecord],
    destination: Path | BinaryIO,
) -> int:
    records = list(selected)
    if not records:
        return 0

    if not isinstance(destination, Path):
        return _write_entries(root, records, destination)

    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        return _write_entries(root, records, destination)
    except ArchiveError:
        destination.unlink(missing_ok=True)
        raise
