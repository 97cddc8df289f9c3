from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from depfilter.archiver import ArchiveError, write_archive
from depfilter.config import DependencyFilterConfig
from depfilter.diff_engine import SelectionResult, diff_snapshots
from depfilter.manifest import commit_manifest, load_manifest, write_temp_manifest
from depfilter.scanner import walk_tree_with_status


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunResult:
    selection: SelectionResult
    snapshot_count: int
    manifest_path: Path
    archive_path: Path | None = None
    archived_count: int = 0
    archive_error: ArchiveError | None = None

    @property
    def ok(self) -> bool:
        return self.archive_error is None


def preview_filter(config: DependencyFilterConfig, *, console: Console | None = None) -> SelectionResult:
    root = config.root_path
    new = walk_tree_with_status(root, config.path_filter, console=console)
    old = load_manifest(root)
    return diff_snapshots(new, old, config.mode, config.interval)


def run_filter(config: DependencyFilterConfig, *, console: Console | None = None) -> RunResult:
    root = config.root_path
    new = walk_tree_with_status(root, config.path_filter, console=console)
    write_temp_manifest(root, new)

    old = load_manifest(root)
    selection = diff_snapshots(new, old, config.mode, config.interval)

    output = config.output_path
    archive_path: Path | None = None
    archived_count = 0
    archive_error: ArchiveError | None = None

    if selection.records:
        try:
            archived_count = write_archive(root, selection.records, output)
            archive_path = output
        except ArchiveError as exc:
            logger.warning("%s", exc)
            archive_error = exc
    elif config.archive_path is None and output.exists():
        # The default archive always describes the latest run.
        logger.info("No changes selected; removing stale archive %s", output)
        output.unlink()

    manifest = commit_manifest(root)
    return RunResult(
        selection=selection,
        snapshot_count=len(new),
        manifest_path=manifest,
        archive_path=archive_path,
        archived_count=archived_count,
        archive_error=archive_error,
    )
