from __future__ import annotations

import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest

from depfilter.config import build_config
from depfilter.filters import build_path_filter
from depfilter.scanner import walk_tree

from conftest import BASE_TIME, write_file


def test_walk_records_regular_files_only(repo: Path):
    snapshot = walk_tree(repo)

    assert [record.key for record in snapshot] == [
        "com/acme/tool/2.1/tool-2.1.jar",
        "org/example/lib/1.0/lib-1.0.jar",
        "org/example/lib/1.0/lib-1.0.pom",
    ]
    assert all(not record.is_dir for record in snapshot)
    jar = snapshot.by_key()["org/example/lib/1.0/lib-1.0.jar"]
    assert jar.name == "lib-1.0.jar"
    assert jar.relative_path == "org/example/lib/1.0"
    assert jar.size == len(b"jar-bytes")


def test_walk_tracks_latest_modified(repo: Path):
    snapshot = walk_tree(repo)

    assert snapshot.latest_modified == BASE_TIME


def test_root_level_file_has_empty_relative_path(tmp_path: Path):
    write_file(tmp_path, "settings.xml")

    (record,) = walk_tree(tmp_path)

    assert record.relative_path == ""
    assert record.key == "settings.xml"


def test_reserved_files_never_enter_snapshot(repo: Path, monkeypatch):
    for name in (".dependency-filter.json", ".dependency-filter-tmp.json", "dependency-filter.zip"):
        write_file(repo, name)
        write_file(repo, f"org/example/{name}")
    write_file(repo, "bin/dfilter")
    config = build_config(repo, archive_path=repo / "out" / "changes.zip")
    write_file(repo, "out/changes.zip")

    monkeypatch.setattr(sys, "argv", [str(repo / "bin" / "dfilter")])
    snapshot = walk_tree(repo, config.path_filter)

    keys = {record.key for record in snapshot}
    assert keys == {
        "com/acme/tool/2.1/tool-2.1.jar",
        "org/example/lib/1.0/lib-1.0.jar",
        "org/example/lib/1.0/lib-1.0.pom",
    }


def test_walk_applies_glob_patterns(repo: Path):
    path_filter = build_path_filter(exclude_patterns=["*.pom"])

    keys = {record.key for record in walk_tree(repo, path_filter)}

    assert "org/example/lib/1.0/lib-1.0.pom" not in keys
    assert "org/example/lib/1.0/lib-1.0.jar" in keys


@pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permission bits are not enforced",
)
def test_unreadable_directory_is_skipped(repo: Path, caplog):
    locked = repo / "org" / "locked"
    write_file(repo, "org/locked/secret.jar", mtime=BASE_TIME - timedelta(days=1))
    locked.chmod(0)
    try:
        with caplog.at_level("WARNING", logger="depfilter"):
            snapshot = walk_tree(repo)
    finally:
        locked.chmod(0o755)

    keys = {record.key for record in snapshot}
    assert "org/locked/secret.jar" not in keys
    assert "org/example/lib/1.0/lib-1.0.jar" in keys
    assert "Failed to walk folder" in caplog.text


def test_broken_symlink_is_skipped(tmp_path: Path, caplog):
    write_file(tmp_path, "a/real.jar")
    try:
        (tmp_path / "a" / "dangling.jar").symlink_to(tmp_path / "missing.jar")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")

    with caplog.at_level("WARNING", logger="depfilter"):
        keys = {record.key for record in walk_tree(tmp_path)}

    assert keys == {"a/real.jar"}
    assert "Failed to get info" in caplog.text
