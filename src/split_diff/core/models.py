"""Data models for split-diff comparison sessions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from split_diff.core.errors import DiffComputationError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

_BINARY_SAMPLE_BYTES = 8192

RegionId = tuple[int, int]
"""Region identifier: ``(base_start, target_start)`` of the hidden span."""


class Side(StrEnum):
    """Pane a visual row belongs to."""

    base = "base"
    target = "target"
    both = "both"

    @property
    def other(self) -> Side:
        """Return the opposite pane. ``both`` has no opposite."""
        if self == Side.base:
            return Side.target
        if self == Side.target:
            return Side.base
        msg = "Side 'both' has no opposite pane"
        raise ValueError(msg)


class SegmentKind(StrEnum):
    """Type of an edit segment."""

    equal = "equal"
    insert = "insert"
    delete = "delete"
    replace = "replace"


class RowKind(StrEnum):
    """Type of a visual row."""

    code = "code"
    collapsed = "collapsed"


@dataclass(frozen=True)
class LineRange:
    """Half-open interval ``[start, end)`` of 0-indexed line numbers."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            msg = f"Invalid line range [{self.start}, {self.end})"
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.start <= line < self.end

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    @property
    def empty(self) -> bool:
        """True when the range holds no lines."""
        return self.start == self.end


class TextRevision:
    """An ordered, 0-indexed, read-only view over the lines of one revision.

    The wrapped sequence is referenced, not copied. Revisions are owned by
    the caller and must not change while a session uses them.
    """

    __slots__ = ("_lines", "label")

    def __init__(self, lines: Sequence[str], *, label: str = "") -> None:
        self._lines = lines
        self.label = label

    @classmethod
    def from_text(cls, text: str, *, label: str = "") -> TextRevision:
        """Split ``text`` into lines (line endings are dropped)."""
        return cls(text.splitlines(), label=label)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        encoding: str = "utf-8",
        errors: str = "strict",
        label: str = "",
    ) -> TextRevision:
        """Decode ``data`` and split it into lines.

        Raises:
            DiffComputationError: If the data looks binary or cannot be
                decoded with the given encoding.
        """
        if b"\x00" in data[:_BINARY_SAMPLE_BYTES]:
            msg = f"Cannot diff binary content{_label_suffix(label)}"
            raise DiffComputationError(msg)
        try:
            text = data.decode(encoding, errors=errors)
        except (UnicodeDecodeError, LookupError) as exc:
            msg = f"Cannot decode revision{_label_suffix(label)}: {exc}"
            raise DiffComputationError(msg) from exc
        return cls.from_text(text, label=label)

    @classmethod
    def from_path(cls, path: Path, *, encoding: str = "utf-8") -> TextRevision:
        """Read and decode a file from disk."""
        return cls.from_bytes(path.read_bytes(), encoding=encoding, label=str(path))

    @property
    def lines(self) -> Sequence[str]:
        return self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> str:
        return self._lines[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __repr__(self) -> str:
        return f"TextRevision(label={self.label!r}, lines={len(self._lines)})"


def _label_suffix(label: str) -> str:
    return f" ({label})" if label else ""


@dataclass(frozen=True)
class EditSegment:
    """A maximal run of lines classified as equal, inserted, deleted or replaced."""

    kind: SegmentKind
    base_range: LineRange
    target_range: LineRange

    def range_for(self, side: Side) -> LineRange:
        """Return the line range on ``side`` (``base`` or ``target``)."""
        if side == Side.base:
            return self.base_range
        if side == Side.target:
            return self.target_range
        msg = "A segment range needs a concrete side"
        raise ValueError(msg)


@dataclass(frozen=True)
class CollapseRegion:
    """A span of unchanged lines that may be hidden behind one indicator row.

    ``base_range`` and ``target_range`` cover the hidden span only; context
    lines around it are never part of the region.
    """

    base_range: LineRange
    target_range: LineRange
    collapsed: bool = True

    @property
    def region_id(self) -> RegionId:
        return (self.base_range.start, self.target_range.start)

    @property
    def line_count(self) -> int:
        return len(self.base_range)

    def range_for(self, side: Side) -> LineRange:
        """Return the hidden span on ``side`` (``base`` or ``target``)."""
        if side == Side.base:
            return self.base_range
        if side == Side.target:
            return self.target_range
        msg = "A region range needs a concrete side"
        raise ValueError(msg)

    def with_collapsed(self, collapsed: bool) -> CollapseRegion:
        """Return a copy with the ``collapsed`` flag set."""
        if collapsed == self.collapsed:
            return self
        return replace(self, collapsed=collapsed)


@dataclass(frozen=True, slots=True)
class VisualRow:
    """One row of a pane's presentation model."""

    side: Side
    kind: RowKind
    line_index: int | None = None
    segment_kind: SegmentKind | None = None
    region_id: RegionId | None = None
    line_count: int | None = None

    @classmethod
    def code(cls, side: Side, line_index: int, segment_kind: SegmentKind) -> VisualRow:
        return cls(side=side, kind=RowKind.code, line_index=line_index, segment_kind=segment_kind)

    @classmethod
    def indicator(cls, region_id: RegionId, line_count: int) -> VisualRow:
        return cls(
            side=Side.both,
            kind=RowKind.collapsed,
            region_id=region_id,
            line_count=line_count,
        )

    @property
    def is_indicator(self) -> bool:
        return self.kind == RowKind.collapsed

    def indicator_label(self, max_displayed: int = 9999) -> str:
        """Label for an indicator row, e.g. ``"12 unchanged lines"``.

        Counts above ``max_displayed`` are shown as ``"{max_displayed}+"``.
        """
        if self.line_count is None:
            return ""
        count = f"{max_displayed}+" if self.line_count > max_displayed else str(self.line_count)
        noun = "line" if self.line_count == 1 else "lines"
        return f"{count} unchanged {noun}"


@dataclass
class ViewState:
    """Mutable view state owned by exactly one comparison session."""

    collapse_enabled: bool = True
    manually_expanded: set[RegionId] = field(default_factory=set)

    def reset(self, *, collapse_enabled: bool) -> None:
        """Forget manual expansions and set the global collapse flag."""
        self.collapse_enabled = collapse_enabled
        self.manually_expanded.clear()


@dataclass(frozen=True)
class DiffStats:
    """Summary statistics for a comparison."""

    base_lines: int
    target_lines: int
    unchanged: int
    added: int
    removed: int
    regions: int
    hidden_lines: int

    @classmethod
    def from_segments(
        cls,
        segments: Sequence[EditSegment],
        regions: Sequence[CollapseRegion] = (),
    ) -> DiffStats:
        """Compute stats by summing segment and region sizes."""
        base_lines = segments[-1].base_range.end if segments else 0
        target_lines = segments[-1].target_range.end if segments else 0
        return cls(
            base_lines=base_lines,
            target_lines=target_lines,
            unchanged=sum(len(s.base_range) for s in segments if s.kind == SegmentKind.equal),
            added=sum(len(s.target_range) for s in segments if s.kind != SegmentKind.equal),
            removed=sum(len(s.base_range) for s in segments if s.kind != SegmentKind.equal),
            regions=len(regions),
            hidden_lines=sum(r.line_count for r in regions if r.collapsed),
        )

    @property
    def identical(self) -> bool:
        return self.added == 0 and self.removed == 0
