"""Public API for split_diff.output."""

from __future__ import annotations

from split_diff.output.base import Renderer, align_rows
from split_diff.output.json_output import JsonRenderer
from split_diff.output.rich_output import RichRenderer

__all__ = [
    "JsonRenderer",
    "Renderer",
    "RichRenderer",
    "align_rows",
]
