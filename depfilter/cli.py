from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from depfilter.config import (
    ConfigError,
    DependencyFilterConfig,
    build_config,
    default_interval,
    default_mode,
)
from depfilter.diff_engine import SelectionResult
from depfilter.logging_setup import configure_logging
from depfilter.models import FileRecord
from depfilter.pipeline import preview_filter, run_filter


app = typer.Typer(
    help="dfilter (dependency-filter): archive what changed in a local Maven dependency repository."
)
console = Console()


def _render_records(title: str, records: list[FileRecord], style: str) -> None:
    if not records:
        return

    table = Table(title=f"{title} ({len(records)})", title_style=style)
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for record in records:
        table.add_row(
            record.key,
            str(record.size),
            record.last_modified.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)


def _render_selection(selection: SelectionResult, requested_mode: str) -> None:
    if selection.mode.value != requested_mode:
        console.print(
            f"[yellow]No previous manifest found.[/yellow] Using {selection.mode.value} mode for this run."
        )
    _render_records("Added", selection.added, "green")
    _render_records("Removed", selection.removed, "yellow")
    if not selection.has_changes:
        console.print("[green]No changes detected.[/green]")


def _load_run_config(
    dependency: str,
    mode: str | None,
    interval: int | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    output: str | None = None,
) -> DependencyFilterConfig | None:
    try:
        return build_config(
            dependency,
            mode=mode if mode is not None else default_mode(),
            interval=interval if interval is not None else default_interval(),
            include_patterns=include,
            exclude_patterns=exclude,
            archive_path=Path(output) if output else None,
        )
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        return None


def _run(
    dependency: str,
    mode: str | None,
    interval: int | None,
    output: str | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> int:
    config = _load_run_config(dependency, mode, interval, include, exclude, output)
    if config is None:
        return 1

    console.print(f"Scanning [bold]{config.root_path}[/bold] ...")
    try:
        result = run_filter(config, console=console)
    except KeyboardInterrupt:
        console.print(
            "[yellow]Run interrupted.[/yellow] The previous manifest was kept; rerun `dfilter run` when ready."
        )
        return 130
    except OSError as exc:
        console.print(f"[red]Run failed:[/red] {exc}")
        return 1

    _render_selection(result.selection, config.mode)

    if result.archive_error is not None:
        console.print(f"[red]Archive aborted:[/red] {result.archive_error}")
    elif result.archive_path is not None:
        console.print(
            f"[green]Archived {result.archived_count} file(s)[/green] to {result.archive_path}"
        )

    console.print(
        f"Manifest updated: {result.snapshot_count} tracked file(s) in {result.manifest_path}"
    )
    return 0 if result.ok else 1


@app.command()
def run(
    dependency: str = typer.Option(
        ...,
        "--dependency",
        "-d",
        help="Maven dependency directory to scan.",
    ),
    mode: str | None = typer.Option(
        None,
        "--mode",
        help="compare: diff against the previous manifest; latest: files modified in the latest burst. "
        "Defaults to $DFILTER_MODE or compare.",
    ),
    interval: int | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Latest-mode window in minutes. Defaults to $DFILTER_INTERVAL or 1.",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Archive path. Defaults to dependency-filter.zip inside the dependency directory.",
    ),
    include: list[str] | None = typer.Option(
        None,
        "--include",
        help="Include glob pattern(s) for paths to consider (repeatable).",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        help="Exclude glob pattern(s) for paths to ignore (repeatable).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics."),
) -> None:
    """Archive changed dependency files and refresh the manifest."""
    configure_logging(console, verbose=verbose)
    raise typer.Exit(
        code=_run(dependency, mode, interval, output, tuple(include or ()), tuple(exclude or ()))
    )


def _status(
    dependency: str,
    mode: str | None,
    interval: int | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> int:
    config = _load_run_config(dependency, mode, interval, include, exclude)
    if config is None:
        return 1

    console.print(f"Scanning [bold]{config.root_path}[/bold] ...")
    try:
        selection = preview_filter(config, console=console)
    except KeyboardInterrupt:
        console.print("[yellow]Status interrupted.[/yellow] Nothing was written.")
        return 130

    _render_selection(selection, config.mode)
    console.print(f"Manifest baseline remains in {config.manifest_path}")
    return 0


@app.command()
def status(
    dependency: str = typer.Option(
        ...,
        "--dependency",
        "-d",
        help="Maven dependency directory to scan.",
    ),
    mode: str | None = typer.Option(None, "--mode", help="compare or latest."),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Latest-mode window in minutes."
    ),
    include: list[str] | None = typer.Option(
        None,
        "--include",
        help="Include glob pattern(s) for paths to consider (repeatable).",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        help="Exclude glob pattern(s) for paths to ignore (repeatable).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics."),
) -> None:
    """Show what the next run would archive without writing anything."""
    configure_logging(console, verbose=verbose)
    raise typer.Exit(
        code=_status(dependency, mode, interval, tuple(include or ()), tuple(exclude or ()))
    )
