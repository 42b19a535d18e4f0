"""TUI widgets for side-by-side diff display."""

from split_diff.tui.widgets.diff_pane import DiffPane
from split_diff.tui.widgets.status_bar import StatusBar

__all__ = ["DiffPane", "StatusBar"]
