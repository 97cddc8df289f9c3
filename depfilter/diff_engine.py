from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from depfilter.models import FileRecord, Snapshot


logger = logging.getLogger(__name__)


class SelectionMode(str, Enum):
    COMPARE = "compare"
    LATEST = "latest"


@dataclass(slots=True)
class SelectionResult:
    mode: SelectionMode
    records: list[FileRecord]
    added: list[FileRecord] = field(default_factory=list)
    removed: list[FileRecord] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.records)


def resolve_mode(old: Snapshot, mode: SelectionMode | str) -> SelectionMode:
    requested = SelectionMode(mode)
    if not old:
        if requested is not SelectionMode.LATEST:
            logger.info("No previous manifest records; falling back to latest mode")
        return SelectionMode.LATEST
    return requested


def select_latest(new: Snapshot, interval: int) -> list[FileRecord]:
    latest = new.latest_modified
    if latest is None:
        return []

    if interval <= 0:
        return [record for record in new if record.last_modified == latest]

    window = timedelta(minutes=interval)
    return [record for record in new if latest - record.last_modified < window]


def select_compare(new: Snapshot, old: Snapshot) -> list[FileRecord]:
    new_by_key = new.by_key()
    old_by_key = old.by_key()

    visited: dict[str, bool] = {key: False for key in old_by_key}
    for key in new_by_key:
        visited[key] = key in old_by_key

    selected: list[FileRecord] = []
    for key, in_both in visited.items():
        if in_both:
            continue
        if key in old_by_key:
            selected.append(old_by_key[key])
        else:
            selected.append(new_by_key[key])
    return selected


def diff_snapshots(
    new: Snapshot,
    old: Snapshot,
    mode: SelectionMode | str,
    interval: int,
) -> SelectionResult:
    effective = resolve_mode(old, mode)
    if effective is SelectionMode.LATEST:
        records = select_latest(new, interval)
    else:
        records = select_compare(new, old)

    new_keys = {record.key for record in new}
    added = sorted((r for r in records if r.key in new_keys), key=lambda r: r.key)
    removed = sorted((r for r in records if r.key not in new_keys), key=lambda r: r.key)
    logger.debug(
        "Selected %d record(s) in %s mode (%d added, %d removed)",
        len(records),
        effective.value,
        len(added),
        len(removed),
    )
    return SelectionResult(mode=effective, records=records, added=added, removed=removed)


def select(
    new: Snapshot,
    old: Snapshot,
    mode: SelectionMode | str,
    interval: int,
) -> list[FileRecord]:
    return diff_snapshots(new, old, mode, interval).records
