"""Status bar widget showing comparison statistics and collapse state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.widgets import Static

if TYPE_CHECKING:
    from split_diff.core.session import DiffSession


class StatusBar(Static):
    """Bottom bar displaying line counts, change breakdown, and collapse state."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $boost;
        color: $text;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__("Computing diff...")
        self.last_content: str = "Computing diff..."

    def update_session(self, session: DiffSession) -> None:
        """Redraw from the session's current state."""
        if not session.available:
            content = f"[yellow]Diff unavailable: {session.error}[/yellow]"
        else:
            stats = session.stats
            collapse = "on" if session.collapse_enabled else "off"
            content = (
                f"{stats.base_lines} vs {stats.target_lines} lines | "
                f"[green]{stats.added} added[/green] "
                f"[red]{stats.removed} removed[/red] "
                f"[dim]{stats.unchanged} unchanged[/dim] "
                f"| collapse: {collapse} "
                f"({len(session.layout.base.collapsed_region_ids)} collapsed)"
            )
        self.last_content = content
        self.update(content)
