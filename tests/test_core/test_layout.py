"""Tests for split_diff.core.layout."""

from __future__ import annotations

import time

import pytest

from split_diff.core.differ import diff
from split_diff.core.errors import RegionNotFound
from split_diff.core.layout import layout
from split_diff.core.models import (
    CollapseRegion,
    EditSegment,
    LineRange,
    RowKind,
    SegmentKind,
    Side,
)
from split_diff.core.planner import plan


def _lines(count: int, prefix: str = "line") -> list[str]:
    return [f"{prefix} {i}" for i in range(count)]


def _single_change() -> tuple[EditSegment, ...]:
    """20 lines, line 10 changed: one region hiding lines 0-6."""
    base = _lines(20)
    target = list(base)
    target[10] = "changed"
    return diff(base, target)


def _interior() -> tuple[EditSegment, ...]:
    """Changed first and last lines around 100 unchanged ones."""
    middle = _lines(100, "shared")
    return diff(["old head", *middle, "old tail"], ["new head", *middle, "new tail"])


def _check_bijection(segments: tuple[EditSegment, ...]) -> None:
    result = layout(segments, plan(segments))
    for side in (Side.base, Side.target):
        pane = result.pane(side)
        for row in range(len(pane)):
            line = pane.row_to_line(row)
            assert pane.line_to_row(line) == row
            if pane.rows[row].kind == RowKind.code:
                assert pane.rows[row].line_index == line


class TestRowSequence:
    """Verify rows produced for each pane."""

    def test_single_change_rows(self) -> None:
        segments = _single_change()
        result = layout(segments, plan(segments))
        rows = result.base.rows
        assert len(rows) == 14
        assert rows[0].is_indicator
        assert rows[0].line_count == 7
        assert [r.line_index for r in rows[1:4]] == [7, 8, 9]
        assert rows[4].segment_kind == SegmentKind.replace
        assert rows[4].side == Side.base
        assert [r.line_index for r in rows[5:]] == list(range(11, 20))

    def test_unchanged_rows_are_shared(self) -> None:
        segments = _single_change()
        result = layout(segments, plan(segments))
        assert result.base.rows[1].side == Side.both
        assert result.target.rows[4].side == Side.target

    def test_no_regions_shows_every_line(self) -> None:
        segments = _interior()
        result = layout(segments, ())
        assert len(result.base) == 102
        assert len(result.target) == 102
        assert result.base.hidden_lines == 0

    def test_full_replace_shows_every_line(self) -> None:
        segments = diff(_lines(30, "a"), _lines(25, "b"))
        result = layout(segments, plan(segments))
        assert len(result.base) == 30
        assert len(result.target) == 25
        assert result.base.collapsed_region_ids == ()

    def test_expanded_regions_are_not_hidden(self) -> None:
        segments = _interior()
        regions = tuple(r.with_collapsed(False) for r in plan(segments))
        assert len(layout(segments, regions).base) == 102

    def test_region_outside_unchanged_segment_rejected(self) -> None:
        segments = _interior()
        bogus = CollapseRegion(LineRange(0, 5), LineRange(0, 5))
        with pytest.raises(ValueError, match="unchanged"):
            layout(segments, (bogus,))

    def test_empty_layout(self) -> None:
        result = layout((), ())
        assert len(result.base) == 0
        assert result.connector_blocks() == ()


class TestLineRowMapping:
    """Verify the line/row bijection and hidden-line resolution."""

    def test_hidden_lines_map_to_indicator(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        pane = result.base
        assert len(pane) == 9
        for line in range(4, 98):
            assert pane.line_to_row(line) == 4
        assert pane.line_to_row(98) == 5
        assert pane.line_to_row(101) == 8

    def test_indicator_row_maps_to_first_hidden_line(self) -> None:
        segments = _interior()
        pane = layout(segments, plan(segments)).base
        assert pane.row_to_line(4) == 4
        assert pane.row_to_line(5) == 98

    def test_round_trip_single_change(self) -> None:
        _check_bijection(_single_change())

    def test_round_trip_interior(self) -> None:
        _check_bijection(_interior())

    def test_round_trip_with_insertions_and_deletions(self) -> None:
        base = _lines(60)
        target = [*base[:5], "new a", "new b", *base[5:40], *base[45:]]
        _check_bijection(diff(base, target))

    def test_out_of_range(self) -> None:
        segments = _single_change()
        pane = layout(segments, plan(segments)).base
        with pytest.raises(IndexError):
            pane.line_to_row(20)
        with pytest.raises(IndexError):
            pane.row_to_line(14)
        with pytest.raises(IndexError):
            pane.line_to_row(-1)

    def test_region_at_row(self) -> None:
        segments = _interior()
        pane = layout(segments, plan(segments)).base
        assert pane.region_at_row(4) == (4, 4)
        assert pane.region_at_row(3) is None


class TestExpand:
    """Verify expanding a region splices its lines in place."""

    def test_expand_replaces_indicator(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        before = result.base.rows
        row = result.base.expand((4, 4))
        assert row == 4
        after = result.base.rows
        assert len(after) == 102
        assert after[:4] == before[:4]
        assert [r.line_index for r in after[4:98]] == list(range(4, 98))
        assert after[98:] == before[5:]

    def test_expand_both_panes(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        result.expand((4, 4))
        assert len(result.base) == 102
        assert len(result.target) == 102
        _ = [result.base.line_to_row(i) for i in range(102)]

    def test_expand_updates_later_regions(self) -> None:
        base = _lines(80)
        target = list(base)
        target[0] = "x"
        target[40] = "y"
        segments = diff(base, target)
        result = layout(segments, plan(segments))
        first, second = result.base.collapsed_region_ids
        assert (first, second) == ((4, 4), (44, 44))
        row_of_second = result.base.line_to_row(second[0])
        assert row_of_second == 12

        result.expand(first)
        assert result.base.region_at_row(row_of_second) is None
        new_row = result.base.line_to_row(second[0])
        assert new_row == row_of_second + 32
        assert result.base.region_at_row(new_row) == second
        for row in range(len(result.base)):
            assert result.base.line_to_row(result.base.row_to_line(row)) == row

    def test_expand_unknown_region(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        with pytest.raises(RegionNotFound) as exc_info:
            result.base.expand((5, 5))
        assert exc_info.value.region_id == (5, 5)

    def test_expand_twice_raises(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        result.base.expand((4, 4))
        with pytest.raises(RegionNotFound):
            result.base.expand((4, 4))

    def test_rows_snapshot_is_stable(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        snapshot = result.base.rows
        assert result.base.rows is snapshot
        result.base.expand((4, 4))
        assert len(snapshot) == 9

    def test_expand_with_shifted_numbering(self) -> None:
        base = _lines(40)
        segments = diff(base, ["inserted", *base])
        result = layout(segments, plan(segments))
        assert result.base.collapsed_region_ids == ((3, 4),)

        result.expand((3, 4))
        assert [r.line_index for r in result.base.rows[3:]] == list(range(3, 40))
        assert [r.line_index for r in result.target.rows[4:]] == list(range(4, 41))

    def test_expand_large_region_is_fast(self) -> None:
        base = _lines(10_000)
        target = list(base)
        target[5] = "changed 5"
        target[9990] = "changed 9990"
        segments = diff(base, target)
        regions = plan(segments)
        assert [r.line_count for r in regions] == [9978]

        timings: list[float] = []
        for _ in range(3):
            result = layout(segments, regions)
            started = time.perf_counter()
            result.expand(regions[0].region_id)
            timings.append(time.perf_counter() - started)
            assert len(result.base) == 10_000
            assert len(result.target) == 10_000
        assert min(timings) < 0.02


class TestCrossPane:
    """Verify counterpart lines, row syncing and connector blocks."""

    def test_counterpart_of_unchanged_line(self) -> None:
        segments = diff(["a", "c"], ["a", "b", "c"])
        result = layout(segments, ())
        assert result.counterpart_line(Side.base, 1) == 2
        assert result.counterpart_line(Side.target, 2) == 1

    def test_counterpart_of_inserted_line_is_anchor(self) -> None:
        segments = diff(["a", "c"], ["a", "b", "c"])
        result = layout(segments, ())
        assert result.counterpart_line(Side.target, 1) == 1

    def test_counterpart_of_replaced_lines_is_proportional(self) -> None:
        segments = diff(["a", "b1", "b2", "b3", "b4", "c"], ["a", "x1", "x2", "c"])
        result = layout(segments, ())
        assert [result.counterpart_line(Side.base, i) for i in range(1, 5)] == [1, 1, 2, 2]

    def test_counterpart_out_of_range(self) -> None:
        result = layout(diff(["a"], ["a"]), ())
        with pytest.raises(IndexError):
            result.counterpart_line(Side.base, 1)

    def test_sync_row_through_indicator(self) -> None:
        segments = _interior()
        result = layout(segments, plan(segments))
        assert result.sync_row(Side.base, 4) == 4
        assert result.sync_row(Side.target, 8) == 8

    def test_sync_row_against_empty_side(self) -> None:
        result = layout(diff([], ["a", "b"]), ())
        assert result.sync_row(Side.target, 1) == 0

    def test_connector_blocks(self) -> None:
        segments = diff(["a", "c", "d"], ["a", "b", "c"])
        blocks = layout(segments, ()).connector_blocks()
        assert [b.kind for b in blocks] == [SegmentKind.insert, SegmentKind.delete]
        insert, delete = blocks
        assert insert.base_crushed
        assert insert.base_rows == LineRange(1, 1)
        assert insert.target_rows == LineRange(1, 2)
        assert delete.target_crushed
        assert delete.target_rows == LineRange(3, 3)
        assert delete.base_rows == LineRange(2, 3)

    def test_pane_needs_concrete_side(self) -> None:
        with pytest.raises(ValueError, match="concrete side"):
            layout((), ()).pane(Side.both)
