"""Visual layout: row sequences and line/row mapping for both panes."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from itertools import repeat
from dataclasses import dataclass
from typing import TYPE_CHECKING

from split_diff.core.errors import RegionNotFound
from split_diff.core.models import LineRange, SegmentKind, Side, VisualRow

if TYPE_CHECKING:
    from collections.abc import Sequence

    from split_diff.core.models import CollapseRegion, EditSegment, RegionId


@dataclass(frozen=True)
class ConnectorBlock:
    """Row spans of one changed segment in both panes.

    A side without lines is "crushed": its span is empty and its ``start``
    is the row the block anchors to.
    """

    kind: SegmentKind
    base_rows: LineRange
    target_rows: LineRange

    @property
    def base_crushed(self) -> bool:
        return self.base_rows.empty

    @property
    def target_crushed(self) -> bool:
        return self.target_rows.empty


class PaneLayout:
    """Row sequence of one pane plus the bidirectional line/row mapping.

    Collapsed spans are kept sorted with a running count of hidden lines,
    so lookups are binary searches. Each span carries its code rows, built
    with the layout, so expanding a region is a single list splice plus the
    bookkeeping of the regions after it.
    """

    def __init__(
        self,
        side: Side,
        total_lines: int,
        rows: list[VisualRow],
        spans: Sequence[tuple[LineRange, RegionId, list[VisualRow]]],
    ) -> None:
        self.side = side
        self.total_lines = total_lines
        self._rows = rows
        self._snapshot: tuple[VisualRow, ...] | None = None
        self._starts = [span.start for span, _, _ in spans]
        self._ends = [span.end for span, _, _ in spans]
        self._ids = [region_id for _, region_id, _ in spans]
        self._hidden = [hidden for _, _, hidden in spans]
        self._hidden_before = [0]
        for span, _, _ in spans:
            self._hidden_before.append(self._hidden_before[-1] + len(span) - 1)
        self._indicator_rows = [
            start - hidden for start, hidden in zip(self._starts, self._hidden_before)
        ]

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> tuple[VisualRow, ...]:
        """The pane's rows, top to bottom. Cached until the next expansion."""
        if self._snapshot is None:
            self._snapshot = tuple(self._rows)
        return self._snapshot

    @property
    def collapsed_region_ids(self) -> tuple[RegionId, ...]:
        return tuple(self._ids)

    @property
    def hidden_lines(self) -> int:
        return sum(end - start for start, end in zip(self._starts, self._ends))

    def line_to_row(self, line: int) -> int:
        """Row showing ``line``; hidden lines resolve to their indicator row.

        Raises:
            IndexError: If ``line`` is outside the revision.
        """
        if not 0 <= line < self.total_lines:
            msg = f"Line {line} out of range for {self.side.value} pane ({self.total_lines} lines)"
            raise IndexError(msg)
        k = bisect_right(self._starts, line) - 1
        if k >= 0 and line < self._ends[k]:
            return self._indicator_rows[k]
        return line - self._hidden_before[k + 1]

    def row_to_line(self, row: int) -> int:
        """Line shown at ``row``; indicator rows resolve to the first hidden line.

        Raises:
            IndexError: If ``row`` is outside the pane.
        """
        if not 0 <= row < len(self._rows):
            msg = f"Row {row} out of range for {self.side.value} pane ({len(self._rows)} rows)"
            raise IndexError(msg)
        j = bisect_right(self._indicator_rows, row) - 1
        if j >= 0 and self._indicator_rows[j] == row:
            return self._starts[j]
        return row + self._hidden_before[j + 1]

    def region_at_row(self, row: int) -> RegionId | None:
        """Region id if ``row`` is a collapsed indicator, else None."""
        k = bisect_left(self._indicator_rows, row)
        if k < len(self._indicator_rows) and self._indicator_rows[k] == row:
            return self._ids[k]
        return None

    def expand(self, region_id: RegionId) -> int:
        """Replace a region's indicator row with its code rows.

        Returns:
            The row index where the expanded lines begin.

        Raises:
            RegionNotFound: If the region is not collapsed in this pane.
        """
        k = self._find(region_id)
        row = self._indicator_rows[k]
        shift = self._ends[k] - self._starts[k] - 1

        self._rows[row : row + 1] = self._hidden[k]
        self._snapshot = None

        del self._starts[k], self._ends[k], self._ids[k], self._indicator_rows[k], self._hidden[k]
        del self._hidden_before[k + 1]
        for idx in range(k + 1, len(self._hidden_before)):
            self._hidden_before[idx] -= shift
        for idx in range(k, len(self._indicator_rows)):
            self._indicator_rows[idx] += shift
        return row

    def _find(self, region_id: RegionId) -> int:
        start = region_id[0] if self.side == Side.base else region_id[1]
        k = bisect_left(self._starts, start)
        if k < len(self._starts) and self._ids[k] == region_id:
            return k
        raise RegionNotFound(region_id)


class DiffLayout:
    """Both panes of a comparison plus cross-pane mapping."""

    def __init__(
        self,
        segments: Sequence[EditSegment],
        base: PaneLayout,
        target: PaneLayout,
    ) -> None:
        self._segments = segments
        self.base = base
        self.target = target
        self._seg_starts: dict[Side, list[int]] = {}
        self._seg_index: dict[Side, list[int]] = {}
        for side in (Side.base, Side.target):
            starts: list[int] = []
            indices: list[int] = []
            for index, segment in enumerate(segments):
                own = segment.range_for(side)
                if not own.empty:
                    starts.append(own.start)
                    indices.append(index)
            self._seg_starts[side] = starts
            self._seg_index[side] = indices

    def pane(self, side: Side) -> PaneLayout:
        if side == Side.base:
            return self.base
        if side == Side.target:
            return self.target
        msg = "A pane needs a concrete side"
        raise ValueError(msg)

    def expand(self, region_id: RegionId) -> None:
        """Expand a region in both panes.

        Raises:
            RegionNotFound: If the region is not currently collapsed.
        """
        self.base.expand(region_id)
        self.target.expand(region_id)

    def counterpart_line(self, side: Side, line: int) -> int:
        """Line on the other side that corresponds to ``line`` on ``side``.

        Unchanged lines map exactly, replaced lines proportionally, and
        inserted or deleted lines map to where the block sits on the other
        side.
        """
        own_pane = self.pane(side)
        if not 0 <= line < own_pane.total_lines:
            msg = f"Line {line} out of range for {side.value} pane ({own_pane.total_lines} lines)"
            raise IndexError(msg)
        k = bisect_right(self._seg_starts[side], line) - 1
        segment = self._segments[self._seg_index[side][k]]
        own = segment.range_for(side)
        other = segment.range_for(side.other)
        offset = line - own.start

        if segment.kind == SegmentKind.equal:
            return other.start + offset
        if other.empty:
            other_total = self.pane(side.other).total_lines
            return max(0, min(other.start, other_total - 1))
        return other.start + offset * len(other) // len(own)

    def sync_row(self, side: Side, row: int) -> int:
        """Row in the other pane that corresponds to ``row`` in ``side``'s pane."""
        line = self.pane(side).row_to_line(row)
        other_pane = self.pane(side.other)
        if other_pane.total_lines == 0:
            return 0
        return other_pane.line_to_row(self.counterpart_line(side, line))

    def connector_blocks(self) -> tuple[ConnectorBlock, ...]:
        """Row spans for every changed segment, for drawing connectors."""
        blocks: list[ConnectorBlock] = []
        for segment in self._segments:
            if segment.kind == SegmentKind.equal:
                continue
            blocks.append(
                ConnectorBlock(
                    kind=segment.kind,
                    base_rows=self._row_span(self.base, segment.base_range),
                    target_rows=self._row_span(self.target, segment.target_range),
                )
            )
        return tuple(blocks)

    @staticmethod
    def _row_span(pane: PaneLayout, lines: LineRange) -> LineRange:
        if lines.start >= pane.total_lines:
            anchor = len(pane)
        else:
            anchor = pane.line_to_row(lines.start)
        return LineRange(anchor, anchor + len(lines))


def layout(
    segments: Sequence[EditSegment],
    regions: Sequence[CollapseRegion],
) -> DiffLayout:
    """Lay out both panes, hiding every collapsed region behind one row.

    Raises:
        ValueError: If a collapsed region does not lie inside an unchanged
            segment.
    """
    collapsed = [region for region in regions if region.collapsed]
    hidden_rows: dict[LineRange, list[VisualRow]] = {}
    base = _build_pane(Side.base, segments, collapsed, hidden_rows)
    target = _build_pane(Side.target, segments, collapsed, hidden_rows)
    return DiffLayout(segments, base, target)


def _build_pane(
    side: Side,
    segments: Sequence[EditSegment],
    collapsed: Sequence[CollapseRegion],
    hidden_rows: dict[LineRange, list[VisualRow]],
) -> PaneLayout:
    by_start = {region.range_for(side).start: region for region in collapsed}
    rows: list[VisualRow] = []
    spans: list[tuple[LineRange, RegionId, list[VisualRow]]] = []

    for segment in segments:
        own = segment.range_for(side)
        if segment.kind != SegmentKind.equal:
            rows.extend(VisualRow.code(side, line, segment.kind) for line in own)
            continue

        line = own.start
        while line < own.end:
            region = by_start.get(line)
            if region is None:
                rows.append(VisualRow.code(Side.both, line, SegmentKind.equal))
                line += 1
                continue
            span = region.range_for(side)
            if span.end > own.end:
                msg = f"Region {region.region_id} extends past its unchanged segment"
                raise ValueError(msg)
            rows.append(VisualRow.indicator(region.region_id, region.line_count))
            hidden = hidden_rows.get(span)
            if hidden is None:
                hidden = hidden_rows[span] = _equal_rows(span)
            spans.append((span, region.region_id, hidden))
            line = span.end

    if len(spans) != len(collapsed):
        msg = "Collapsed regions must lie inside unchanged segments"
        raise ValueError(msg)

    total = segments[-1].range_for(side).end if segments else 0
    return PaneLayout(side, total, rows, spans)


def _equal_rows(lines: LineRange) -> list[VisualRow]:
    """Code rows for unchanged lines, shared by panes with the same numbering."""
    indices = range(lines.start, lines.end)
    return list(map(VisualRow.code, repeat(Side.both), indices, repeat(SegmentKind.equal)))
