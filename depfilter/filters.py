from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


def _normalize_pattern(pattern: str) -> str:
    normalized = pattern.strip().replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def _match_pattern(path: str, pattern: str) -> bool:
    path_obj = PurePosixPath(path)
    norm = _normalize_pattern(pattern)
    if not norm:
        return False
    # Support both root anchored and recursive matching styles.
    return (
        path_obj.match(norm)
        or path_obj.match(f"**/{norm}")
        or (norm.endswith("/") and path.startswith(norm))
    )


@dataclass(slots=True, frozen=True)
class PathFilter:
    """Single exclusion policy applied once per walked file.

    ``reserved_names`` reject a file by base name at any depth (the manifest
    sidecars and the default archive). ``reserved_paths`` reject exact
    root-relative paths (the running executable, a custom archive location).
    Glob patterns narrow the walk further.
    """

    reserved_names: frozenset[str] = frozenset()
    reserved_paths: frozenset[str] = frozenset()
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()

    def is_reserved(self, path: str) -> bool:
        return PurePosixPath(path).name in self.reserved_names or path in self.reserved_paths

    def matches(self, path: str) -> bool:
        if self.is_reserved(path):
            return False
        if self.include_patterns and not any(
            _match_pattern(path, pattern) for pattern in self.include_patterns
        ):
            return False
        if any(_match_pattern(path, pattern) for pattern in self.exclude_patterns):
            return False
        return True


def build_path_filter(
    include_patterns: list[str] | tuple[str, ...] | None = None,
    exclude_patterns: list[str] | tuple[str, ...] | None = None,
    *,
    reserved_names: list[str] | tuple[str, ...] | frozenset[str] | None = None,
    reserved_paths: list[str] | tuple[str, ...] | frozenset[str] | None = None,
) -> PathFilter:
    include = tuple(_normalize_pattern(pattern) for pattern in (include_patterns or []) if pattern)
    exclude = tuple(_normalize_pattern(pattern) for pattern in (exclude_patterns or []) if pattern)
    return PathFilter(
        reserved_names=frozenset(reserved_names or ()),
        reserved_paths=frozenset(
            PurePosixPath(_normalize_pattern(path)).as_posix() for path in (reserved_paths or ()) if path
        ),
        include_patterns=include,
        exclude_patterns=exclude,
    )
