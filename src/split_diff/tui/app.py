"""Textual TUI application for interactive side-by-side viewing."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Horizontal
from textual.widgets import Footer, Header, OptionList

from split_diff.core.controller import DiffController
from split_diff.core.models import Side
from split_diff.tui.widgets.diff_pane import DiffPane
from split_diff.tui.widgets.status_bar import StatusBar

if TYPE_CHECKING:
    from split_diff.core.models import TextRevision
    from split_diff.core.session import DiffSession


class SplitDiffApp(App[None]):
    """Interactive two-pane viewer with collapsible unchanged regions."""

    CSS_PATH = "styles/app.tcss"

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit"),
        Binding("c", "toggle_collapse", "Toggle Collapse"),
        Binding("n", "next_change", "Next Change"),
        Binding("p", "prev_change", "Prev Change"),
    ]

    def __init__(
        self,
        session: DiffSession,
        base: TextRevision,
        target: TextRevision,
        *,
        timeout: float | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._base = base
        self._target = target
        self._timeout = timeout
        self._controller = DiffController(session)
        self.title = f"{base.label or 'base'} vs {target.label or 'target'}"

    @property
    def session(self) -> DiffSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-container"):
            yield DiffPane(Side.base, id="base-pane")
            yield DiffPane(Side.target, id="target-pane")
        yield StatusBar()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#base-pane", DiffPane).focus()
        self.run_worker(self._load(), exclusive=True, group="diff")

    async def on_unmount(self) -> None:
        await self._controller.close()

    async def _load(self) -> None:
        await self._controller.request_diff(self._base, self._target, timeout=self._timeout)
        self._refresh_panes()

    def _panes(self) -> tuple[DiffPane, DiffPane]:
        return (
            self.query_one("#base-pane", DiffPane),
            self.query_one("#target-pane", DiffPane),
        )

    def _active_pane(self) -> DiffPane:
        if isinstance(self.focused, DiffPane):
            return self.focused
        return self._panes()[0]

    def _refresh_panes(self, *, side: Side = Side.base, row: int | None = None) -> None:
        """Redraw both panes, keeping ``row`` of ``side``'s pane in view."""
        base_pane, target_pane = self._panes()
        own, other = (base_pane, target_pane) if side == Side.base else (target_pane, base_pane)
        own.show_rows(self._session, highlight=row)
        other.show_rows(self._session, highlight=self._synced_row(side, own.highlighted))
        self.query_one(StatusBar).update_session(self._session)

    def _synced_row(self, side: Side, row: int | None) -> int | None:
        if row is None or not self._session.get_visual_rows(side):
            return None
        return self._session.sync_row(side, row)

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        """Keep the other pane aligned with the focused one."""
        pane = event.option_list
        if not isinstance(pane, DiffPane) or pane is not self.focused:
            return
        base_pane, target_pane = self._panes()
        other = target_pane if pane is base_pane else base_pane
        row = self._synced_row(pane.side, event.option_index)
        if row is not None:
            other.move_to(row)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Expand the collapsed region behind a selected indicator row."""
        pane = event.option_list
        if not isinstance(pane, DiffPane):
            return
        region_id = self._session.region_at_row(pane.side, event.option_index)
        if region_id is None:
            return
        self._session.expand_region(region_id)
        self._refresh_panes(side=pane.side, row=event.option_index)

    def action_toggle_collapse(self) -> None:
        """Flip global collapsing; rapid presses coalesce."""
        self._controller.request_toggle()
        self.run_worker(self._apply_toggle(), exclusive=True, group="toggle")

    async def _apply_toggle(self) -> None:
        pane = self._active_pane()
        line = self._current_line(pane)
        await self._controller.flush()
        row = None if line is None else self._session.map_line_to_row(pane.side, line)
        self._refresh_panes(side=pane.side, row=row)

    def _current_line(self, pane: DiffPane) -> int | None:
        if pane.highlighted is None or not pane.row_count:
            return None
        return self._session.map_row_to_line(pane.side, pane.highlighted)

    def action_next_change(self) -> None:
        """Move to the first row of the next changed block."""
        self._jump(forward=True)

    def action_prev_change(self) -> None:
        """Move to the first row of the previous changed block."""
        self._jump(forward=False)

    def _jump(self, *, forward: bool) -> None:
        pane = self._active_pane()
        if not pane.row_count:
            return
        current = pane.highlighted if pane.highlighted is not None else -1
        starts = sorted(
            {
                (block.base_rows if pane.side == Side.base else block.target_rows).start
                for block in self._session.connector_blocks()
            }
        )
        if forward:
            candidates = [row for row in starts if row > current]
            target = candidates[0] if candidates else None
        else:
            candidates = [row for row in starts if row < current]
            target = candidates[-1] if candidates else None
        if target is None:
            return
        pane.move_to(target)
        if pane is not self.focused:
            row = self._synced_row(pane.side, pane.highlighted)
            base_pane, target_pane = self._panes()
            other = target_pane if pane is base_pane else base_pane
            if row is not None:
                other.move_to(row)

