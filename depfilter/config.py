from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from depfilter.filters import PathFilter, build_path_filter


MANIFEST_FILENAME = ".dependency-filter.json"
TEMP_MANIFEST_FILENAME = ".dependency-filter-tmp.json"
ARCHIVE_FILENAME = "dependency-filter.zip"
RESERVED_FILENAMES = (MANIFEST_FILENAME, TEMP_MANIFEST_FILENAME, ARCHIVE_FILENAME)

VALID_MODES = ("compare", "latest")
DEFAULT_MODE = "compare"
DEFAULT_INTERVAL_MINUTES = 1


class ConfigError(ValueError):
    pass


@dataclass(slots=True)
class DependencyFilterConfig:
    root: str
    mode: str = DEFAULT_MODE
    interval: int = DEFAULT_INTERVAL_MINUTES
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    archive_path: str | None = None

    @property
    def root_path(self) -> Path:
        return Path(self.root).expanduser().resolve()

    @property
    def manifest_path(self) -> Path:
        return self.root_path / MANIFEST_FILENAME

    @property
    def temp_manifest_path(self) -> Path:
        return self.root_path / TEMP_MANIFEST_FILENAME

    @property
    def output_path(self) -> Path:
        if self.archive_path:
            return Path(self.archive_path).expanduser().resolve()
        return self.root_path / ARCHIVE_FILENAME

    @property
    def path_filter(self) -> PathFilter:
        reserved_paths = [
            path
            for path in (
                relative_to_root(self.root_path, self.output_path),
                relative_to_root(self.root_path, executable_path()),
            )
            if path is not None
        ]
        return build_path_filter(
            self.include_patterns,
            self.exclude_patterns,
            reserved_names=RESERVED_FILENAMES,
            reserved_paths=reserved_paths,
        )


def executable_path() -> Path | None:
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0 or argv0 == "-c":
        return None
    return Path(argv0).resolve()


def relative_to_root(root: Path, path: Path | None) -> str | None:
    if path is None:
        return None
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return None


def validate_mode(mode: str) -> str:
    normalized = (mode or "").lower().strip()
    if normalized not in VALID_MODES:
        raise ConfigError(f"Invalid mode: {mode!r}. Use 'compare' or 'latest'.")
    return normalized


def default_mode() -> str:
    return os.getenv("DFILTER_MODE", DEFAULT_MODE)


def default_interval() -> int:
    value = os.getenv("DFILTER_INTERVAL", "").strip()
    if not value:
        return DEFAULT_INTERVAL_MINUTES
    try:
        return int(value)
    except ValueError:
        return DEFAULT_INTERVAL_MINUTES


def build_config(
    root: str | Path,
    *,
    mode: str = DEFAULT_MODE,
    interval: int = DEFAULT_INTERVAL_MINUTES,
    include_patterns: list[str] | tuple[str, ...] | None = None,
    exclude_patterns: list[str] | tuple[str, ...] | None = None,
    archive_path: str | Path | None = None,
) -> DependencyFilterConfig:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise ConfigError(f"Dependency directory not found: {root_path}")
    if not root_path.is_dir():
        raise ConfigError(f"Dependency path is not a directory: {root_path}")

    return DependencyFilterConfig(
        root=str(root_path),
        mode=validate_mode(mode),
        interval=interval,
        include_patterns=tuple(include_patterns or ()),
        exclude_patterns=tuple(exclude_patterns or ()),
        archive_path=None if archive_path is None else str(archive_path),
    )
