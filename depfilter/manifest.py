from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from depfilter.config import MANIFEST_FILENAME, TEMP_MANIFEST_FILENAME
from depfilter.models import FileRecord, Snapshot


logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"\.(\d+)")


class ManifestFormatError(ValueError):
    pass


def manifest_path(root: Path) -> Path:
    return root / MANIFEST_FILENAME


def temp_manifest_path(root: Path) -> Path:
    return root / TEMP_MANIFEST_FILENAME


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat()


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # datetime accepts exactly six fractional digits on older interpreters.
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def record_to_dict(record: FileRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "relative_path": record.relative_path,
        "size": record.size,
        "isdir": record.is_dir,
        "last_modified": format_timestamp(record.last_modified),
    }


def record_from_dict(data: Any) -> FileRecord:
    if not isinstance(data, dict):
        raise ManifestFormatError(f"Expected an object, got {type(data).__name__}")
    try:
        name = data["name"]
        relative_path = data.get("relative_path", "")
        size = int(data.get("size", 0))
        last_modified = parse_timestamp(str(data["last_modified"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ManifestFormatError(f"Invalid manifest record {data!r}: {exc}") from exc
    if not isinstance(name, str) or not isinstance(relative_path, str):
        raise ManifestFormatError(f"Invalid manifest record {data!r}")
    if size < 0:
        raise ManifestFormatError(f"Negative size in manifest record {data!r}")
    is_dir = data.get("isdir", False)
    if not isinstance(is_dir, bool):
        raise ManifestFormatError(f"Invalid isdir flag in manifest record {data!r}")

    return FileRecord(
        name=name,
        relative_path=relative_path.replace("\\", "/"),
        size=size,
        last_modified=last_modified,
        is_dir=is_dir,
    )


def dump_snapshot(snapshot: Snapshot) -> str:
    return json.dumps([record_to_dict(record) for record in snapshot], indent=2)


def parse_snapshot(payload: str) -> Snapshot:
    data = json.loads(payload)
    if not isinstance(data, list):
        raise ManifestFormatError(f"Expected a JSON array, got {type(data).__name__}")
    records = [record_from_dict(item) for item in data]
    # Directory entries are never part of a snapshot.
    return Snapshot(tuple(record for record in records if not record.is_dir))


def load_manifest(root: Path) -> Snapshot:
    path = manifest_path(root)
    if not path.exists():
        logger.info("No %s found in %s; treating this as the first run", MANIFEST_FILENAME, root)
        return Snapshot.empty()

    try:
        payload = path.read_bytes()
    except OSError as exc:
        logger.warning("Failed to read manifest %s: %s", path, exc)
        return Snapshot.empty()

    try:
        snapshot = parse_snapshot(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, ManifestFormatError) as exc:
        logger.warning("Failed to parse manifest %s: %s", path, exc)
        return Snapshot.empty()

    logger.debug("Loaded %d record(s) from %s", len(snapshot), path)
    return snapshot


def write_temp_manifest(root: Path, snapshot: Snapshot) -> Path:
    path = temp_manifest_path(root)
    with path.open("w", encoding="utf-8") as fh:
        fh.write(dump_snapshot(snapshot))
        fh.write("\n")
        fh.flush()
        os.fsync(fh.fileno())
    logger.debug("Wrote %d record(s) to %s", len(snapshot), path)
    return path


def commit_manifest(root: Path) -> Path:
    source = temp_manifest_path(root)
    target = manifest_path(root)
    os.replace(source, target)
    logger.debug("Replaced %s with %s", target, source)
    return target


def persist_manifest(root: Path, snapshot: Snapshot) -> Path:
    write_temp_manifest(root, snapshot)
    return commit_manifest(root)


def discard_temp_manifest(root: Path) -> None:
    temp_manifest_path(root).unlink(missing_ok=True)
