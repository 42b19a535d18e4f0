"""Comparison session: owns the view state and the derived layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from split_diff.core.classifier import validate_partition
from split_diff.core.config import CollapseConfig
from split_diff.core.differ import LineDiffer
from split_diff.core.errors import DiffComputationError, RegionNotFound
from split_diff.core.layout import layout
from split_diff.core.models import DiffStats, Side, ViewState
from split_diff.core.planner import CollapsePlanner

if TYPE_CHECKING:
    from collections.abc import Sequence

    from split_diff.core.layout import ConnectorBlock, DiffLayout
    from split_diff.core.models import (
        CollapseRegion,
        EditSegment,
        RegionId,
        TextRevision,
        VisualRow,
    )

logger = structlog.get_logger()


@dataclass(frozen=True)
class PaneRows:
    """Row sequences of both panes, handed to the renderer."""

    base: tuple[VisualRow, ...]
    target: tuple[VisualRow, ...]


class DiffSession:
    """One open side-by-side comparison.

    The session is the single writer of its :class:`ViewState`. Global
    collapse has two states:

    - enabled: every eligible region starts collapsed; a region moves to
      expanded when :meth:`expand_region` targets it and stays expanded
      until collapsing is turned off and on again;
    - disabled: regions are kept but none is collapsed.

    Loading a new revision pair resets the state to the configured default.
    A diff that cannot be computed leaves the session "unavailable" with no
    rows instead of raising.
    """

    def __init__(
        self,
        config: CollapseConfig | None = None,
        *,
        differ: LineDiffer | None = None,
    ) -> None:
        self._config = config or CollapseConfig()
        self._differ = differ or LineDiffer()
        self._planner = CollapsePlanner(self._config)
        self._state = ViewState(collapse_enabled=self._config.collapse_enabled_by_default)
        self._base: TextRevision | None = None
        self._target: TextRevision | None = None
        self._segments: tuple[EditSegment, ...] = ()
        self._regions: tuple[CollapseRegion, ...] = ()
        self._layout: DiffLayout = layout((), ())
        self._error: str | None = None

    # -- Loading ------------------------------------------------------------

    def load(self, base: TextRevision, target: TextRevision) -> bool:
        """Diff a revision pair and reset the view state.

        Reloading the same revision objects reuses the previous diff.

        Returns:
            True if the diff is available, False if it could not be
            computed.
        """
        if base is self._base and target is self._target and self._error is None:
            self.apply_segments(base, target, self._segments)
            return True
        try:
            segments = self._differ.diff(base, target)
        except DiffComputationError as exc:
            self.mark_unavailable(str(exc), base=base, target=target)
            return False
        self.apply_segments(base, target, segments)
        return True

    def apply_segments(
        self,
        base: TextRevision,
        target: TextRevision,
        segments: Sequence[EditSegment],
    ) -> None:
        """Install a computed edit script as the session's new comparison."""
        try:
            validate_partition(segments)
        except DiffComputationError as exc:
            self.mark_unavailable(str(exc), base=base, target=target)
            return
        self._base = base
        self._target = target
        self._segments = tuple(segments)
        self._error = None
        self._state.reset(collapse_enabled=self._config.collapse_enabled_by_default)
        self._replan()
        logger.info(
            "comparison_loaded",
            base=base.label,
            target=target.label,
            segments=len(self._segments),
            regions=len(self._regions),
            collapse_enabled=self._state.collapse_enabled,
        )

    def mark_unavailable(
        self,
        reason: str,
        *,
        base: TextRevision | None = None,
        target: TextRevision | None = None,
    ) -> None:
        """Drop the current comparison and remember why no diff is shown."""
        self._base = base
        self._target = target
        self._segments = ()
        self._regions = ()
        self._layout = layout((), ())
        self._error = reason
        self._state.reset(collapse_enabled=self._config.collapse_enabled_by_default)
        logger.warning("diff_unavailable", reason=reason)

    # -- Queries --------------------------------------------------------------

    @property
    def config(self) -> CollapseConfig:
        return self._config

    @property
    def differ(self) -> LineDiffer:
        return self._differ

    @property
    def available(self) -> bool:
        return self._error is None

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def base(self) -> TextRevision | None:
        return self._base

    @property
    def target(self) -> TextRevision | None:
        return self._target

    @property
    def segments(self) -> tuple[EditSegment, ...]:
        return self._segments

    @property
    def regions(self) -> tuple[CollapseRegion, ...]:
        return self._regions

    @property
    def collapse_enabled(self) -> bool:
        return self._state.collapse_enabled

    @property
    def manually_expanded(self) -> frozenset[RegionId]:
        return frozenset(self._state.manually_expanded)

    @property
    def layout(self) -> DiffLayout:
        return self._layout

    @property
    def stats(self) -> DiffStats:
        return DiffStats.from_segments(self._segments, self._regions)

    def get_visual_rows(self, side: Side | str) -> tuple[VisualRow, ...]:
        return self._layout.pane(Side(side)).rows

    def rows(self) -> PaneRows:
        return PaneRows(base=self._layout.base.rows, target=self._layout.target.rows)

    def map_line_to_row(self, side: Side | str, line_index: int) -> int:
        return self._layout.pane(Side(side)).line_to_row(line_index)

    def map_row_to_line(self, side: Side | str, row_index: int) -> int:
        return self._layout.pane(Side(side)).row_to_line(row_index)

    def sync_row(self, side: Side | str, row_index: int) -> int:
        """Row in the other pane matching ``row_index`` in ``side``'s pane."""
        return self._layout.sync_row(Side(side), row_index)

    def region_at_row(self, side: Side | str, row_index: int) -> RegionId | None:
        return self._layout.pane(Side(side)).region_at_row(row_index)

    def connector_blocks(self) -> tuple[ConnectorBlock, ...]:
        return self._layout.connector_blocks()

    def indicator_label(self, row: VisualRow) -> str:
        return row.indicator_label(self._config.max_displayed_line_count)

    # -- State transitions -----------------------------------------------------

    def toggle_global_collapse(self) -> PaneRows:
        """Flip global collapsing and return the new rows."""
        return self.set_collapse_enabled(not self._state.collapse_enabled)

    def set_collapse_enabled(self, enabled: bool) -> PaneRows:
        """Turn global collapsing on or off; setting the current value is a no-op.

        Turning it off keeps the regions but expands all of them. Turning it
        on plans afresh, so regions expanded by hand collapse again.
        """
        if enabled == self._state.collapse_enabled:
            return self.rows()
        self._state.reset(collapse_enabled=enabled)
        if enabled:
            self._replan()
        else:
            self._regions = tuple(region.with_collapsed(False) for region in self._regions)
            self._layout = layout(self._segments, self._regions)
        logger.debug("collapse_toggled", enabled=enabled, regions=len(self._regions))
        return self.rows()

    def expand_region(self, region_id: RegionId) -> PaneRows:
        """Expand one collapsed region in place and return the new rows.

        Unknown, stale or already expanded regions are ignored.
        """
        region_id = (int(region_id[0]), int(region_id[1]))
        if not self._state.collapse_enabled or region_id in self._state.manually_expanded:
            return self.rows()
        try:
            self._layout.expand(region_id)
        except RegionNotFound:
            logger.debug("region_not_found", region_id=region_id)
            return self.rows()

        self._state.manually_expanded.add(region_id)
        self._regions = tuple(
            region.with_collapsed(False) if region.region_id == region_id else region
            for region in self._regions
        )
        logger.debug("region_expanded", region_id=region_id)
        return self.rows()

    def _replan(self) -> None:
        self._regions = self._planner.plan(self._segments, enabled=self._state.collapse_enabled)
        self._layout = layout(self._segments, self._regions)
