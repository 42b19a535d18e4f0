"""Renderer protocol and row alignment shared by renderers."""

from __future__ import annotations

from itertools import zip_longest
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from split_diff.core.models import Side

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from split_diff.core.models import DiffStats, VisualRow
    from split_diff.core.session import DiffSession


@runtime_checkable
class Renderer(Protocol):
    """Protocol for rendering a comparison session.

    Implementations must provide a render method that takes a DiffSession
    and writes output to the appropriate destination (console, file, etc.).
    """

    def render(self, session: DiffSession) -> None:
        """Render the session's current rows."""
        ...

    def render_stats(self, stats: DiffStats) -> None:
        """Render summary statistics."""
        ...


def align_rows(
    base_rows: Sequence[VisualRow],
    target_rows: Sequence[VisualRow],
) -> Iterator[tuple[VisualRow | None, VisualRow | None]]:
    """Pair the rows of both panes for a single aligned table.

    Rows shared by both panes (unchanged lines and indicators) appear in
    the same order in each pane and are paired directly. The pane-specific
    rows between two shared rows are zipped, padding the shorter side.

    Raises:
        ValueError: If one pane has shared rows the other lacks.
    """
    i = j = 0
    while i < len(base_rows) or j < len(target_rows):
        base_own: list[VisualRow] = []
        target_own: list[VisualRow] = []
        while i < len(base_rows) and base_rows[i].side != Side.both:
            base_own.append(base_rows[i])
            i += 1
        while j < len(target_rows) and target_rows[j].side != Side.both:
            target_own.append(target_rows[j])
            j += 1
        yield from zip_longest(base_own, target_own)

        if i < len(base_rows) and j < len(target_rows):
            yield base_rows[i], target_rows[j]
            i += 1
            j += 1
        elif i < len(base_rows) or j < len(target_rows):
            msg = "Panes disagree on their shared rows"
            raise ValueError(msg)
