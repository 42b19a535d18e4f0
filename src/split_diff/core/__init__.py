"""Public API for split_diff.core."""

from __future__ import annotations

from split_diff.core.classifier import ClassifiedSegment, classify, validate_partition
from split_diff.core.config import CollapseConfig
from split_diff.core.controller import DiffController
from split_diff.core.differ import LineDiffer, diff
from split_diff.core.errors import (
    DiffComputationError,
    InvalidConfiguration,
    RegionNotFound,
    SplitDiffError,
)
from split_diff.core.layout import ConnectorBlock, DiffLayout, PaneLayout, layout
from split_diff.core.models import (
    CollapseRegion,
    DiffStats,
    EditSegment,
    LineRange,
    RegionId,
    RowKind,
    SegmentKind,
    Side,
    TextRevision,
    ViewState,
    VisualRow,
)
from split_diff.core.planner import CollapsePlanner, plan
from split_diff.core.session import DiffSession, PaneRows

__all__ = [
    "ClassifiedSegment",
    "CollapseConfig",
    "CollapsePlanner",
    "CollapseRegion",
    "ConnectorBlock",
    "DiffComputationError",
    "DiffController",
    "DiffLayout",
    "DiffSession",
    "DiffStats",
    "EditSegment",
    "InvalidConfiguration",
    "LineDiffer",
    "LineRange",
    "PaneLayout",
    "PaneRows",
    "RegionId",
    "RegionNotFound",
    "RowKind",
    "SegmentKind",
    "Side",
    "SplitDiffError",
    "TextRevision",
    "ViewState",
    "VisualRow",
    "classify",
    "diff",
    "layout",
    "plan",
    "validate_partition",
]
