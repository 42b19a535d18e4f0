"""Shared row styles and display helpers for TUI widgets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text

from split_diff.core.models import SegmentKind

if TYPE_CHECKING:
    from split_diff.core.models import TextRevision, VisualRow

ROW_STYLES: dict[SegmentKind, tuple[str, str]] = {
    SegmentKind.delete: ("red", "-"),
    SegmentKind.insert: ("green", "+"),
    SegmentKind.replace: ("yellow", "~"),
    SegmentKind.equal: ("", " "),
}

INDICATOR_STYLE = "dim italic"


def row_text(row: VisualRow, revision: TextRevision, label: str, *, gutter: int = 5) -> Text:
    """Render one pane row as a single line of styled text.

    ``label`` is only used for indicator rows.
    """
    if row.is_indicator:
        return Text(f"{'':>{gutter}} ⋯ {label} ⋯", style=INDICATOR_STYLE)
    if row.line_index is None:
        return Text()
    style, prefix = ROW_STYLES[row.segment_kind or SegmentKind.equal]
    text = Text(f"{row.line_index + 1:>{gutter}} ", style="dim")
    text.append(f"{prefix} {revision[row.line_index]}", style=style)
    return text
