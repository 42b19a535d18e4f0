"""Region classification: which segments may collapse."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from split_diff.core.errors import DiffComputationError
from split_diff.core.models import SegmentKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from split_diff.core.models import EditSegment


@dataclass(frozen=True)
class ClassifiedSegment:
    """An edit segment annotated for the collapse planner.

    ``at_file_start``/``at_file_end`` are set when no change precedes or
    follows the segment, i.e. it touches that file boundary on both sides.
    """

    segment: EditSegment
    collapsible: bool
    at_file_start: bool
    at_file_end: bool

    @property
    def length(self) -> int:
        return len(self.segment.base_range)


def classify(segments: Sequence[EditSegment]) -> tuple[ClassifiedSegment, ...]:
    """Type segments for collapsing and check the partition invariant.

    Only ``equal`` segments are collapse candidates; inserted, deleted and
    replaced lines are always visible.

    Raises:
        DiffComputationError: If the segments leave gaps or overlap.
    """
    validate_partition(segments)
    last = len(segments) - 1
    return tuple(
        ClassifiedSegment(
            segment=segment,
            collapsible=segment.kind == SegmentKind.equal,
            at_file_start=index == 0,
            at_file_end=index == last,
        )
        for index, segment in enumerate(segments)
    )


def validate_partition(segments: Sequence[EditSegment]) -> None:
    """Check that segments tile both revisions contiguously.

    Raises:
        DiffComputationError: On a gap, an overlap or a malformed segment.
    """
    base_pos = 0
    target_pos = 0
    for index, segment in enumerate(segments):
        base, target = segment.base_range, segment.target_range
        if base.start != base_pos or target.start != target_pos:
            msg = (
                f"Segment {index} starts at base {base.start}, target {target.start}; "
                f"expected base {base_pos}, target {target_pos}"
            )
            raise DiffComputationError(msg)
        _check_shape(index, segment)
        base_pos, target_pos = base.end, target.end


def _check_shape(index: int, segment: EditSegment) -> None:
    base_len = len(segment.base_range)
    target_len = len(segment.target_range)
    kind = segment.kind
    if kind == SegmentKind.equal:
        valid = base_len == target_len and base_len > 0
    elif kind == SegmentKind.insert:
        valid = base_len == 0 and target_len > 0
    elif kind == SegmentKind.delete:
        valid = target_len == 0 and base_len > 0
    else:
        valid = base_len > 0 and target_len > 0
    if not valid:
        msg = f"Segment {index} has kind {kind.value} with {base_len}/{target_len} lines"
        raise DiffComputationError(msg)
