from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from depfilter.models import FileRecord


BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(key: str, *, size: int = 1, age: timedelta = timedelta(0)) -> FileRecord:
    relative_path, _, name = key.rpartition("/")
    return FileRecord(
        name=name,
        relative_path=relative_path,
        size=size,
        last_modified=BASE_TIME - age,
    )


def write_file(root: Path, relative: str, content: bytes = b"data", *, mtime: datetime | None = None) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    if mtime is not None:
        stamp = mtime.timestamp()
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repository"
    write_file(root, "org/example/lib/1.0/lib-1.0.jar", b"jar-bytes", mtime=BASE_TIME - timedelta(hours=2))
    write_file(root, "org/example/lib/1.0/lib-1.0.pom", b"<project/>", mtime=BASE_TIME - timedelta(hours=2))
    write_file(root, "com/acme/tool/2.1/tool-2.1.jar", b"tool-bytes", mtime=BASE_TIME)
    return root
