"""Collapse planning for long unchanged runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from split_diff.core.classifier import classify
from split_diff.core.config import DEFAULT_CONTEXT_LINES, DEFAULT_MIN_COLLAPSE_THRESHOLD
from split_diff.core.errors import InvalidConfiguration
from split_diff.core.models import CollapseRegion, LineRange

if TYPE_CHECKING:
    from collections.abc import Sequence

    from split_diff.core.classifier import ClassifiedSegment
    from split_diff.core.config import CollapseConfig
    from split_diff.core.models import EditSegment

logger = structlog.get_logger()


def plan(
    segments: Sequence[EditSegment],
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    min_threshold: int = DEFAULT_MIN_COLLAPSE_THRESHOLD,
    enabled: bool = True,
) -> tuple[CollapseRegion, ...]:
    """Compute the collapse regions for an edit script.

    An unchanged run of ``L`` lines is eligible iff
    ``L >= 2 * context_lines + min_threshold``. The hidden span keeps
    ``context_lines`` visible lines next to each neighbouring change. A run
    that starts or ends the file (with a change on its other end) hides
    everything up to that file boundary. A run covering the whole file keeps
    context on both ends.

    Every region is returned collapsed. With ``enabled=False`` no plan is
    made and the result is empty.

    Raises:
        InvalidConfiguration: If ``context_lines < 1`` or
            ``min_threshold < 0``.
    """
    if context_lines < 1:
        msg = f"context_lines must be >= 1, got {context_lines}"
        raise InvalidConfiguration(msg)
    if min_threshold < 0:
        msg = f"min_threshold must be >= 0, got {min_threshold}"
        raise InvalidConfiguration(msg)
    if not enabled:
        return ()

    threshold = 2 * context_lines + min_threshold
    regions: list[CollapseRegion] = []
    for item in classify(segments):
        if not item.collapsible or item.length < threshold:
            continue
        region = _hidden_span(item, context_lines)
        if region is not None:
            regions.append(region)

    logger.debug(
        "collapse_planned",
        segments=len(segments),
        regions=len(regions),
        threshold=threshold,
    )
    return tuple(regions)


def _hidden_span(item: ClassifiedSegment, context_lines: int) -> CollapseRegion | None:
    """Trim context off an eligible run, keeping none at a file boundary."""
    whole_file = item.at_file_start and item.at_file_end
    lead = 0 if item.at_file_start and not whole_file else context_lines
    trail = 0 if item.at_file_end and not whole_file else context_lines

    base = item.segment.base_range
    target = item.segment.target_range
    if base.end - trail <= base.start + lead:
        return None
    return CollapseRegion(
        base_range=LineRange(base.start + lead, base.end - trail),
        target_range=LineRange(target.start + lead, target.end - trail),
    )


class CollapsePlanner:
    """Applies a :class:`CollapseConfig` to edit scripts."""

    def __init__(self, config: CollapseConfig) -> None:
        self._config = config

    def plan(
        self,
        segments: Sequence[EditSegment],
        *,
        enabled: bool = True,
    ) -> tuple[CollapseRegion, ...]:
        """Plan regions using the configured context and threshold."""
        return plan(
            segments,
            context_lines=self._config.context_lines,
            min_threshold=self._config.min_collapse_threshold,
            enabled=enabled,
        )
