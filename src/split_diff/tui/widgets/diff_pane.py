"""Pane widget listing one side's visual rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.widgets import OptionList

from split_diff.tui.widgets._styles import row_text

if TYPE_CHECKING:
    from split_diff.core.models import Side
    from split_diff.core.session import DiffSession


class DiffPane(OptionList):
    """One side of the comparison, one option per visual row.

    Selecting an indicator row (enter or click) is reported to the app,
    which expands the region behind it.
    """

    DEFAULT_CSS = """
    DiffPane {
        width: 1fr;
        height: 1fr;
        border: none;
        padding: 0;
    }
    DiffPane:focus {
        border: none;
    }
    """

    def __init__(self, side: Side, *, id: str | None = None) -> None:  # noqa: A002
        super().__init__(id=id)
        self.side = side
        self.row_count: int = 0

    def show_rows(self, session: DiffSession, *, highlight: int | None = None) -> None:
        """Replace the listed rows with the session's current rows for this side."""
        revision = session.base if self.side == "base" else session.target
        rows = session.get_visual_rows(self.side)
        self.clear_options()
        if revision is not None and rows:
            self.add_options(
                [row_text(row, revision, session.indicator_label(row)) for row in rows]
            )
        self.row_count = len(rows)
        if self.row_count:
            self.move_to(0 if highlight is None else highlight)

    def move_to(self, row: int) -> None:
        """Highlight ``row`` (clamped to the pane) and scroll it into view."""
        if not self.row_count:
            return
        self.highlighted = max(0, min(row, self.row_count - 1))
