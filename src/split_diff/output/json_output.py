"""JSON export renderer."""

from __future__ import annotations

import dataclasses
import json
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import TextIO

    from split_diff.core.models import CollapseRegion, DiffStats
    from split_diff.core.session import DiffSession


def _region_to_dict(region: CollapseRegion) -> dict[str, object]:
    data = dataclasses.asdict(region)
    data["region_id"] = list(region.region_id)
    data["line_count"] = region.line_count
    return data


class JsonRenderer:
    """Renders a session's presentation model as JSON to a text stream.

    Output modes:
    - render(): segments, regions and the rows of both panes
    - render_stats(): Summary DiffStats only

    Output goes to stdout by default. Pass a custom TextIO for
    file output or testing.
    """

    def __init__(self, output: TextIO | None = None, *, indent: int = 2) -> None:
        """Initialize with an optional output stream.

        Args:
            output: Text stream for JSON output. Defaults to sys.stdout.
            indent: JSON indentation level. Defaults to 2.
        """
        self._output = output or sys.stdout
        self._indent = indent

    def render(self, session: DiffSession) -> None:
        """Serialize the session as JSON."""
        rows = session.rows()
        data = {
            "base": session.base.label if session.base is not None else None,
            "target": session.target.label if session.target is not None else None,
            "available": session.available,
            "error": session.error,
            "collapse_enabled": session.collapse_enabled,
            "stats": dataclasses.asdict(session.stats),
            "segments": [dataclasses.asdict(s) for s in session.segments],
            "regions": [_region_to_dict(r) for r in session.regions],
            "rows": {
                "base": [dataclasses.asdict(r) for r in rows.base],
                "target": [dataclasses.asdict(r) for r in rows.target],
            },
        }
        json.dump(data, self._output, indent=self._indent)
        self._output.write("\n")

    def render_stats(self, stats: DiffStats) -> None:
        """Serialize summary statistics as JSON."""
        data = dataclasses.asdict(stats)
        json.dump(data, self._output, indent=self._indent)
        self._output.write("\n")
