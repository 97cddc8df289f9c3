from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator


def join_key(relative_path: str, name: str) -> str:
    if not relative_path:
        return name
    return f"{relative_path.rstrip('/')}/{name}"


@dataclass(slots=True, frozen=True)
class FileRecord:
    name: str
    relative_path: str
    size: int
    last_modified: datetime
    is_dir: bool = False

    @property
    def key(self) -> str:
        return join_key(self.relative_path, self.name)

    @property
    def archive_name(self) -> str:
        return self.key


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Records captured by one walk or one manifest load, ordered as produced."""

    records: tuple[FileRecord, ...] = ()

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    @property
    def latest_modified(self) -> datetime | None:
        if not self.records:
            return None
        return max(record.last_modified for record in self.records)

    def by_key(self) -> dict[str, FileRecord]:
        return {record.key: record for record in self.records}

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)
