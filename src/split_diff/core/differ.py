"""Line-level diff engine.

Lines are interned to integer ids, lines with no counterpart on the other
side are discarded up front, and the rest is aligned with Myers' linear-space
divide-and-conquer algorithm. A sub-problem whose middle snake is not found
within a short search is split on its unique common lines instead (the
patience heuristic), so moved blocks do not drive the search into its cost
limit. Change groups are then slid to a canonical position so identical
inputs always yield identical segments:

- a group slides as far down as its content allows;
- if some position on the way lines it up with a change on the other side,
  it is placed there instead, so deletions and insertions merge into one
  ``replace`` segment and unchanged runs stay as long as possible.
"""

from __future__ import annotations

import math
import sys
import time
from bisect import bisect_left
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from split_diff.core.errors import DiffComputationError
from split_diff.core.models import EditSegment, LineRange, SegmentKind, TextRevision

if TYPE_CHECKING:
    import threading
    from collections.abc import MutableSequence

logger = structlog.get_logger()

_MIN_COST_LIMIT = 256
_SEARCH_WINDOW_COST = 64
_EXACT_SEARCH_LINES = 1000
_DEFAULT_WORK_LIMIT = 50_000
_LINE_MAX = sys.maxsize

_Box = tuple[int, int, int, int]


class LineDiffer:
    """Computes an ordered edit script between two revisions.

    The result partitions both revisions completely: the ``base_range`` of
    consecutive segments are contiguous and cover ``[0, len(base))``, and
    likewise for ``target_range``.

    The script is minimal whenever each sub-problem's middle snake lies
    within a short search. Larger edits are anchored on lines that occur
    exactly once on each side, and past ``work_limit`` the remaining
    unaligned spans are reported as replaced outright.
    """

    def __init__(self, *, cost_limit: int | None = None, work_limit: int | None = None) -> None:
        """Initialize the differ.

        Args:
            cost_limit: Edit cost above which a sub-problem stops searching
                for the optimal split and takes the furthest-reaching one.
                The output is still a valid partition but may no longer be
                minimal. Defaults to a value derived from the input size.
            work_limit: Number of edit-graph diagonals the whole diff may
                visit before giving up on alignment.
        """
        if cost_limit is not None and cost_limit < 1:
            msg = f"cost_limit must be >= 1, got {cost_limit}"
            raise ValueError(msg)
        if work_limit is not None and work_limit < 1:
            msg = f"work_limit must be >= 1, got {work_limit}"
            raise ValueError(msg)
        self._cost_limit = cost_limit
        self._work_limit = work_limit or _DEFAULT_WORK_LIMIT

    def diff(
        self,
        base: TextRevision | Sequence[str],
        target: TextRevision | Sequence[str],
        *,
        cancel: threading.Event | None = None,
    ) -> tuple[EditSegment, ...]:
        """Diff two revisions line by line.

        Args:
            base: Lines of the base revision.
            target: Lines of the target revision.
            cancel: Checked between sub-problems; once set, the diff stops
                and raises.

        Raises:
            DiffComputationError: If either input is not a sequence of
                decodable lines, or ``cancel`` was set.
        """
        started = time.perf_counter()
        table: dict[str, int] = {}
        a = _intern_lines(base, "base", table)
        b = _intern_lines(target, "target", table)

        changed_a = [False] * (len(a) + 1)
        changed_b = [False] * (len(b) + 1)
        cost_limit = self._cost_limit or max(_MIN_COST_LIMIT, math.isqrt(len(a) + len(b) + 3))
        aligner = _Aligner(a, b, changed_a, changed_b, cost_limit, self._work_limit, cancel)
        aligner.run()

        _compact(a, changed_a, changed_b)
        _compact(b, changed_b, changed_a)

        segments = _build_segments(changed_a, changed_b, len(a), len(b))
        logger.debug(
            "diff_computed",
            base_lines=len(a),
            target_lines=len(b),
            segments=len(segments),
            work=aligner.work,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return segments


def diff(
    base: TextRevision | Sequence[str],
    target: TextRevision | Sequence[str],
) -> tuple[EditSegment, ...]:
    """Diff two revisions with the default :class:`LineDiffer`."""
    return LineDiffer().diff(base, target)


def _intern_lines(
    revision: TextRevision | Sequence[str],
    name: str,
    table: dict[str, int],
) -> list[int]:
    """Validate a revision and map each line to a shared integer id."""
    lines = revision.lines if isinstance(revision, TextRevision) else revision
    if isinstance(lines, (str, bytes)) or not isinstance(lines, Sequence):
        msg = f"{name} revision must be a sequence of lines, got {type(lines).__name__}"
        raise DiffComputationError(msg)

    ids: list[int] = []
    for index, line in enumerate(lines):
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = f"{name} revision line {index} is not valid UTF-8: {exc}"
                raise DiffComputationError(msg) from exc
        elif not isinstance(line, str):
            msg = f"{name} revision line {index} is {type(line).__name__}, expected str"
            raise DiffComputationError(msg)
        ids.append(table.setdefault(line, len(table)))
    return ids


class _Aligner:
    """Marks changed lines with a minimal (cost-limited) alignment."""

    def __init__(
        self,
        a: list[int],
        b: list[int],
        changed_a: MutableSequence[bool],
        changed_b: MutableSequence[bool],
        cost_limit: int,
        work_limit: int,
        cancel: threading.Event | None = None,
    ) -> None:
        self._changed_a = changed_a
        self._changed_b = changed_b
        self._cost_limit = cost_limit
        self._work_limit = work_limit
        self._cancel = cancel
        self.work = 0

        # Lines absent from the other side can never be matched.
        in_a = set(a)
        in_b = set(b)
        self._index_a = [i for i, line in enumerate(a) if line in in_b]
        self._index_b = [j for j, line in enumerate(b) if line in in_a]
        for i, line in enumerate(a):
            if line not in in_b:
                changed_a[i] = True
        for j, line in enumerate(b):
            if line not in in_a:
                changed_b[j] = True
        self._a = [a[i] for i in self._index_a]
        self._b = [b[j] for j in self._index_b]

        # Diagonal vectors are shared by every sub-problem.
        size = len(self._a) + len(self._b) + 3
        self._vf = [0] * size
        self._vb = [0] * size

    def run(self) -> None:
        a, b = self._a, self._b
        exhausted = False
        stack: list[_Box] = [(0, len(a), 0, len(b))]
        while stack:
            if self._cancel is not None and self._cancel.is_set():
                msg = "Diff cancelled"
                raise DiffComputationError(msg)
            alo, ahi, blo, bhi = stack.pop()
            while alo < ahi and blo < bhi and a[alo] == b[blo]:
                alo += 1
                blo += 1
            while alo < ahi and blo < bhi and a[ahi - 1] == b[bhi - 1]:
                ahi -= 1
                bhi -= 1

            if alo == ahi or blo == bhi or exhausted:
                self._mark_changed(alo, ahi, blo, bhi)
                continue
            if self.work >= self._work_limit:
                logger.debug("diff_work_limit_reached", work=self.work)
                exhausted = True
                self._mark_changed(alo, ahi, blo, bhi)
                continue

            window = self._cost_limit
            if ahi - alo + bhi - blo > _EXACT_SEARCH_LINES:
                window = min(_SEARCH_WINDOW_COST, window)
            x, y, found = self._split(alo, ahi, blo, bhi, window)
            if not found:
                anchored = self._anchored_boxes(alo, ahi, blo, bhi)
                if anchored:
                    stack.extend(anchored)
                    continue
                if window < self._cost_limit:
                    x, y, _ = self._split(alo, ahi, blo, bhi, self._cost_limit)
            stack.append((x, ahi, y, bhi))
            stack.append((alo, x, blo, y))

    def _mark_changed(self, alo: int, ahi: int, blo: int, bhi: int) -> None:
        for i in range(alo, ahi):
            self._changed_a[self._index_a[i]] = True
        for j in range(blo, bhi):
            self._changed_b[self._index_b[j]] = True

    def _anchored_boxes(self, alo: int, ahi: int, blo: int, bhi: int) -> list[_Box]:
        """Split a box on the longest ordered chain of unique common lines.

        Returns the boxes between consecutive anchors, or an empty list when
        the box has no line that occurs exactly once on each side.
        """
        a, b = self._a, self._b
        count_a: dict[int, int] = {}
        pos_a: dict[int, int] = {}
        for i in range(alo, ahi):
            line = a[i]
            count_a[line] = count_a.get(line, 0) + 1
            pos_a[line] = i
        count_b: dict[int, int] = {}
        pos_b: dict[int, int] = {}
        for j in range(blo, bhi):
            line = b[j]
            count_b[line] = count_b.get(line, 0) + 1
            pos_b[line] = j

        # Insertion order follows the base side, so pairs are sorted by i.
        pairs = [
            (pos_a[line], pos_b[line])
            for line, count in count_a.items()
            if count == 1 and count_b.get(line) == 1
        ]
        if not pairs:
            return []

        tails: list[int] = []
        tail_index: list[int] = []
        previous = [-1] * len(pairs)
        for index, (_, j) in enumerate(pairs):
            k = bisect_left(tails, j)
            if k:
                previous[index] = tail_index[k - 1]
            if k == len(tails):
                tails.append(j)
                tail_index.append(index)
            else:
                tails[k] = j
                tail_index[k] = index

        chain: list[tuple[int, int]] = []
        index = tail_index[-1]
        while index != -1:
            chain.append(pairs[index])
            index = previous[index]
        chain.reverse()

        boxes: list[_Box] = []
        i, j = alo, blo
        for x, y in chain:
            if i < x or j < y:
                boxes.append((i, x, j, y))
            i, j = x + 1, y + 1
        if i < ahi or j < bhi:
            boxes.append((i, ahi, j, bhi))
        logger.debug("diff_anchored", anchors=len(chain), base_lines=ahi - alo)
        return boxes

    def _split(
        self, alo: int, ahi: int, blo: int, bhi: int, cost_limit: int
    ) -> tuple[int, int, bool]:
        """Find a point on an optimal path through the edit graph.

        Both ends of the box are known to differ. Forward and backward
        searches run in lockstep until their furthest-reaching paths meet.
        Past ``cost_limit`` the furthest forward point is returned with
        ``found`` set to False.
        """
        a, b = self._a, self._b
        vf, vb = self._vf, self._vb
        n = ahi - alo
        m = bhi - blo
        dmin, dmax = -m, n
        off = m + 1
        delta = n - m
        odd = delta & 1

        fmin = fmax = 0
        bmin = bmax = delta
        vf[off] = 0
        vb[delta + off] = n

        cost = 0
        while True:
            cost += 1

            if fmin > dmin:
                fmin -= 1
                vf[fmin - 1 + off] = -1
            else:
                fmin += 1
            if fmax < dmax:
                fmax += 1
                vf[fmax + 1 + off] = -1
            else:
                fmax -= 1

            for k in range(fmax, fmin - 1, -2):
                if vf[k - 1 + off] >= vf[k + 1 + off]:
                    x = vf[k - 1 + off] + 1
                else:
                    x = vf[k + 1 + off]
                y = x - k
                while x < n and y < m and a[alo + x] == b[blo + y]:
                    x += 1
                    y += 1
                vf[k + off] = x
                if odd and bmin <= k <= bmax and vb[k + off] <= x:
                    self.work += cost
                    return alo + x, blo + y, True

            if bmin > dmin:
                bmin -= 1
                vb[bmin - 1 + off] = _LINE_MAX
            else:
                bmin += 1
            if bmax < dmax:
                bmax += 1
                vb[bmax + 1 + off] = _LINE_MAX
            else:
                bmax -= 1

            for k in range(bmax, bmin - 1, -2):
                if vb[k - 1 + off] < vb[k + 1 + off]:
                    x = vb[k - 1 + off]
                else:
                    x = vb[k + 1 + off] - 1
                y = x - k
                while x > 0 and y > 0 and a[alo + x - 1] == b[blo + y - 1]:
                    x -= 1
                    y -= 1
                vb[k + off] = x
                if not odd and fmin <= k <= fmax and x <= vf[k + off]:
                    self.work += cost
                    return alo + x, blo + y, True

            self.work += (fmax - fmin) // 2 + (bmax - bmin) // 2 + 2
            if cost >= cost_limit:
                x, y = self._furthest_forward(fmin, fmax, off, n, m)
                return alo + x, blo + y, False

    def _furthest_forward(
        self, fmin: int, fmax: int, off: int, n: int, m: int
    ) -> tuple[int, int]:
        """Give up on optimality and split at the furthest forward point."""
        vf = self._vf
        best = -1
        split = (0, 0)
        for k in range(fmax, fmin - 1, -2):
            x = min(vf[k + off], n)
            y = x - k
            if y > m:
                x, y = m + k, m
            if x + y > best:
                best = x + y
                split = (x, y)
        logger.debug("diff_cost_limit_reached", base_lines=n, target_lines=m)
        return split


class _ChangeGroup:
    """A maximal run of changed lines on one side, possibly empty.

    Group ``i`` on one side and group ``i`` on the other sit between the
    same pair of matched lines.
    """

    __slots__ = ("changed", "end", "limit", "start")

    def __init__(self, changed: MutableSequence[bool], limit: int) -> None:
        self.changed = changed
        self.limit = limit
        self.start = 0
        self.end = 0
        while changed[self.end]:
            self.end += 1

    def next(self) -> bool:
        if self.end == self.limit:
            return False
        self.start = self.end + 1
        self.end = self.start
        while self.changed[self.end]:
            self.end += 1
        return True

    def previous(self) -> bool:
        if self.start == 0:
            return False
        self.end = self.start - 1
        self.start = self.end
        while self.start > 0 and self.changed[self.start - 1]:
            self.start -= 1
        return True

    def slide_down(self, lines: list[int]) -> bool:
        if self.end < self.limit and lines[self.start] == lines[self.end]:
            self.changed[self.start] = False
            self.changed[self.end] = True
            self.start += 1
            self.end += 1
            while self.changed[self.end]:
                self.end += 1
            return True
        return False

    def slide_up(self, lines: list[int]) -> bool:
        if self.start > 0 and lines[self.start - 1] == lines[self.end - 1]:
            self.changed[self.start - 1] = True
            self.changed[self.end - 1] = False
            self.start -= 1
            self.end -= 1
            while self.start > 0 and self.changed[self.start - 1]:
                self.start -= 1
            return True
        return False


def _compact(
    lines: list[int],
    changed: MutableSequence[bool],
    other_changed: MutableSequence[bool],
) -> None:
    """Slide change groups on one side to their canonical position."""
    group = _ChangeGroup(changed, len(lines))
    other = _ChangeGroup(other_changed, len(other_changed) - 1)

    while True:
        if group.end != group.start:
            while True:
                size = group.end - group.start
                end_matching_other = -1

                while group.slide_up(lines):
                    other.previous()
                earliest_end = group.end
                if other.end > other.start:
                    end_matching_other = group.end

                while group.slide_down(lines):
                    other.next()
                    if other.end > other.start:
                        end_matching_other = group.end

                # Sliding merged neighbouring groups; go around again.
                if size == group.end - group.start:
                    break

            if group.end != earliest_end and end_matching_other != -1:
                while other.end == other.start:
                    group.slide_up(lines)
                    other.previous()

        if not group.next():
            break
        other.next()


def _build_segments(
    changed_a: Sequence[bool],
    changed_b: Sequence[bool],
    n: int,
    m: int,
) -> tuple[EditSegment, ...]:
    """Walk both change maps in lockstep and emit typed segments."""
    segments: list[EditSegment] = []
    i = j = 0
    while i < n or j < m:
        i0, j0 = i, j
        if i < n and j < m and not changed_a[i] and not changed_b[j]:
            while i < n and j < m and not changed_a[i] and not changed_b[j]:
                i += 1
                j += 1
            kind = SegmentKind.equal
        else:
            while i < n and changed_a[i]:
                i += 1
            while j < m and changed_b[j]:
                j += 1
            if i == i0 and j == j0:
                msg = f"Unmatched unchanged lines at base {i0}, target {j0}"
                raise DiffComputationError(msg)
            kind = _change_kind(i - i0, j - j0)
        segments.append(EditSegment(kind, LineRange(i0, i), LineRange(j0, j)))
    return tuple(segments)


def _change_kind(removed: int, added: int) -> SegmentKind:
    if removed and added:
        return SegmentKind.replace
    if removed:
        return SegmentKind.delete
    return SegmentKind.insert
