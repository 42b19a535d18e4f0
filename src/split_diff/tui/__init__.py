"""Interactive terminal viewer."""

from split_diff.tui.app import SplitDiffApp

__all__ = ["SplitDiffApp"]
