from __future__ import annotations

from depfilter.filters import build_path_filter


def test_reserved_names_match_at_any_depth():
    path_filter = build_path_filter(reserved_names=[".dependency-filter.json"])

    assert not path_filter.matches(".dependency-filter.json")
    assert not path_filter.matches("org/example/.dependency-filter.json")
    assert path_filter.matches("org/example/lib.jar")


def test_reserved_paths_match_exact_relative_path():
    path_filter = build_path_filter(reserved_paths=["./bin\\dfilter"])

    assert not path_filter.matches("bin/dfilter")
    assert path_filter.matches("other/dfilter")


def test_include_and_exclude_patterns():
    path_filter = build_path_filter(include_patterns=["org/"], exclude_patterns=["*.sha1"])

    assert path_filter.matches("org/example/lib.jar")
    assert not path_filter.matches("org/example/lib.jar.sha1")
    assert not path_filter.matches("com/acme/tool.jar")


def test_empty_filter_matches_everything():
    assert build_path_filter().matches("anything/at/all.jar")
