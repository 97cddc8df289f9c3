from __future__ import annotations

from datetime import timedelta

from depfilter.models import Snapshot, join_key

from conftest import BASE_TIME, make_record


def test_key_joins_relative_path_and_name():
    assert join_key("org/example", "lib.jar") == "org/example/lib.jar"
    assert join_key("", "root.txt") == "root.txt"
    assert make_record("org/example/lib.jar").key == "org/example/lib.jar"


def test_snapshot_latest_modified_and_lookup():
    older = make_record("a/old.jar", age=timedelta(hours=1))
    newer = make_record("a/new.jar")
    snapshot = Snapshot((older, newer))

    assert snapshot.latest_modified == BASE_TIME
    assert snapshot.by_key() == {"a/old.jar": older, "a/new.jar": newer}
    assert len(snapshot) == 2
    assert list(snapshot) == [older, newer]


def test_empty_snapshot_is_falsy():
    snapshot = Snapshot.empty()

    assert not snapshot
    assert snapshot.latest_modified is None
