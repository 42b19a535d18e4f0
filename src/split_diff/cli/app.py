"""CLI entry point for split-diff."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import structlog
import typer

from split_diff.core.config import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_MAX_DISPLAYED_LINE_COUNT,
    DEFAULT_MIN_COLLAPSE_THRESHOLD,
    CollapseConfig,
)
from split_diff.core.errors import InvalidConfiguration
from split_diff.core.models import TextRevision
from split_diff.core.session import DiffSession
from split_diff.logging import configure_logging
from split_diff.output.rich_output import RichRenderer

if TYPE_CHECKING:
    from split_diff.output.base import Renderer

logger = structlog.get_logger()

OUTPUT_MODES = ("rich", "json", "tui")

app = typer.Typer(
    name="split-diff",
    help="Compare two files side by side with collapsible unchanged regions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from split_diff import __version__

        typer.echo(f"split-diff {__version__}")
        raise typer.Exit()


def _parse_output_mode(value: str) -> str:
    """Validate the output mode name."""
    if value not in OUTPUT_MODES:
        valid = ", ".join(OUTPUT_MODES)
        msg = f"Invalid output mode '{value}'. Choose from: {valid}"
        raise typer.BadParameter(msg)
    return value


def _build_config(
    *,
    context_lines: int,
    threshold: int,
    no_collapse: bool,
    max_count: int,
) -> CollapseConfig:
    """Build CollapseConfig from CLI flags, falling back to defaults."""
    try:
        return CollapseConfig(
            context_lines=context_lines,
            min_collapse_threshold=threshold,
            collapse_enabled_by_default=not no_collapse,
            max_displayed_line_count=max_count,
        )
    except InvalidConfiguration as exc:
        typer.echo(f"Warning: {exc}; using default collapse settings.", err=True)
        logger.warning("config_invalid_using_defaults", error=str(exc))
        return CollapseConfig(collapse_enabled_by_default=not no_collapse)


def _read_revision(path: Path) -> TextRevision:
    """Read a file into a revision.

    Raises:
        FileNotFoundError: If the path does not exist.
        IsADirectoryError: If the path is a directory.
    """
    if not path.exists():
        msg = f"Path does not exist: {path}"
        raise FileNotFoundError(msg)
    if path.is_dir():
        msg = f"Expected a file, got a directory: {path}"
        raise IsADirectoryError(msg)
    return TextRevision.from_path(path)


def _get_renderer(output_mode: str) -> Renderer:
    """Get the appropriate renderer for the output mode."""
    if output_mode == "json":
        from split_diff.output.json_output import JsonRenderer

        return JsonRenderer()
    return RichRenderer()


@app.command()
def main(
    left: Annotated[
        Path,
        typer.Argument(help="Base (left) file."),
    ],
    right: Annotated[
        Path,
        typer.Argument(help="Target (right) file."),
    ],
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Output mode: rich, json, or tui."),
    ] = "rich",
    context_lines: Annotated[
        int,
        typer.Option("--context", "-C", help="Unchanged lines kept around each change."),
    ] = DEFAULT_CONTEXT_LINES,
    threshold: Annotated[
        int,
        typer.Option(
            "--threshold",
            "-t",
            help="Extra unchanged lines (beyond the context) needed before a run collapses.",
        ),
    ] = DEFAULT_MIN_COLLAPSE_THRESHOLD,
    no_collapse: Annotated[
        bool,
        typer.Option("--no-collapse", help="Start with unchanged regions expanded."),
    ] = False,
    max_count: Annotated[
        int,
        typer.Option("--max-count", help="Largest line count shown on a collapsed region."),
    ] = DEFAULT_MAX_DISPLAYED_LINE_COUNT,
    stat: Annotated[
        bool,
        typer.Option("--stat", help="Show only summary statistics."),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level for diagnostics on stderr."),
    ] = "warning",
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Compare two files side by side.

    Long unchanged runs collapse into a single row, keeping context lines
    next to each change.
    """
    try:
        configure_logging(level=log_level)
        output_mode = _parse_output_mode(output)
        config = _build_config(
            context_lines=context_lines,
            threshold=threshold,
            no_collapse=no_collapse,
            max_count=max_count,
        )
        base = _read_revision(left)
        target = _read_revision(right)

        session = DiffSession(config)

        # TUI runs its own event loop and diffs in the background
        if output_mode == "tui":
            from split_diff.tui import SplitDiffApp

            SplitDiffApp(session, base, target).run()
            return

        if not session.load(base, target):
            typer.echo(f"Error: diff unavailable: {session.error}", err=True)
            raise typer.Exit(code=1)

        renderer = _get_renderer(output_mode)
        if stat:
            renderer.render_stats(session.stats)
        else:
            renderer.render(session)

    except (FileNotFoundError, IsADirectoryError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from None
