"""Exception types raised by the diff engine."""

from __future__ import annotations


class SplitDiffError(Exception):
    """Base class for all split-diff errors."""


class DiffComputationError(SplitDiffError, ValueError):
    """A revision could not be turned into a valid line sequence."""


class InvalidConfiguration(SplitDiffError, ValueError):
    """A configuration value violates its documented constraint."""


class RegionNotFound(SplitDiffError, LookupError):
    """A region identifier does not name a collapsed region."""

    def __init__(self, region_id: tuple[int, int]) -> None:
        self.region_id = region_id
        super().__init__(f"No collapsed region with id {region_id}")
