"""Rich console renderer (default output mode)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from split_diff.core.models import SegmentKind
from split_diff.output.base import align_rows

if TYPE_CHECKING:
    from split_diff.core.models import DiffStats, TextRevision, VisualRow
    from split_diff.core.session import DiffSession

SEGMENT_STYLES: dict[SegmentKind, tuple[str, str]] = {
    SegmentKind.delete: ("red", "-"),
    SegmentKind.insert: ("green", "+"),
    SegmentKind.replace: ("yellow", "~"),
    SegmentKind.equal: ("", " "),
}

INDICATOR_STYLE = "dim italic"


class RichRenderer:
    """Renders a session as a side-by-side table.

    Each table row pairs a base row with its target counterpart. Changed
    lines are color-coded by segment kind, and collapsed regions appear as
    one dim indicator row on both sides.
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize with an optional Rich console.

        Args:
            console: Rich Console instance. Defaults to Console() if None.
        """
        self._console = console or Console()

    def render(self, session: DiffSession) -> None:
        """Render the session's current rows as an aligned table."""
        base, target = session.base, session.target
        title = f"{_label(base, 'base')} vs {_label(target, 'target')}"

        if not session.available:
            self._console.print(f"[bold]{title}[/bold]")
            self._console.print(f"[yellow]Diff unavailable: {session.error}[/yellow]")
            return

        caption = "No differences" if session.stats.identical else None
        table = Table(title=title, title_style="bold", caption=caption, expand=True)
        table.add_column("#", justify="right", style="dim", no_wrap=True)
        table.add_column(_label(base, "base"), ratio=1, overflow="fold")
        table.add_column("#", justify="right", style="dim", no_wrap=True)
        table.add_column(_label(target, "target"), ratio=1, overflow="fold")

        rows = session.rows()
        for left, right in align_rows(rows.base, rows.target):
            if left is not None and left.is_indicator:
                label = Text(f"⋯ {session.indicator_label(left)} ⋯", style=INDICATOR_STYLE)
                table.add_row("", label, "", label)
                continue
            left_no, left_text = self._cell(left, base)
            right_no, right_text = self._cell(right, target)
            table.add_row(left_no, left_text, right_no, right_text)

        self._console.print(table)

    def render_stats(self, stats: DiffStats) -> None:
        """Render summary statistics."""
        self._console.print(
            f"[bold]{stats.base_lines}[/bold] vs [bold]{stats.target_lines}[/bold] lines: "
            f"[green]{stats.added} added[/green], "
            f"[red]{stats.removed} removed[/red], "
            f"[dim]{stats.unchanged} unchanged[/dim], "
            f"{stats.regions} collapsible regions ({stats.hidden_lines} lines hidden)"
        )

    @staticmethod
    def _cell(row: VisualRow | None, revision: TextRevision | None) -> tuple[str, Text]:
        """Return (line number, styled text) for one side of a table row."""
        if row is None or row.line_index is None or revision is None:
            return "", Text("")
        kind = row.segment_kind or SegmentKind.equal
        style, prefix = SEGMENT_STYLES[kind]
        content = revision[row.line_index]
        return str(row.line_index + 1), Text(f"{prefix} {content}", style=style)


def _label(revision: TextRevision | None, default: str) -> str:
    if revision is None or not revision.label:
        return default
    return revision.label
