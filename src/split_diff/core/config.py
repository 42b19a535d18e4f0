"""Collapse configuration consumed from the host."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

import structlog

from split_diff.core.errors import InvalidConfiguration

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger()

DEFAULT_CONTEXT_LINES = 3
DEFAULT_MIN_COLLAPSE_THRESHOLD = 4
DEFAULT_MAX_DISPLAYED_LINE_COUNT = 9999


@dataclass(frozen=True)
class CollapseConfig:
    """Immutable configuration for collapsing unchanged runs.

    An unchanged run of ``L`` lines is collapsed when
    ``L >= 2 * context_lines + min_collapse_threshold``.

    Raises:
        InvalidConfiguration: If a value violates its constraint.
    """

    context_lines: int = DEFAULT_CONTEXT_LINES
    min_collapse_threshold: int = DEFAULT_MIN_COLLAPSE_THRESHOLD
    collapse_enabled_by_default: bool = True
    max_displayed_line_count: int = DEFAULT_MAX_DISPLAYED_LINE_COUNT

    def __post_init__(self) -> None:
        self._require_int("context_lines", self.context_lines, minimum=1)
        self._require_int("min_collapse_threshold", self.min_collapse_threshold, minimum=0)
        self._require_int("max_displayed_line_count", self.max_displayed_line_count, minimum=1)
        if not isinstance(self.collapse_enabled_by_default, bool):
            msg = (
                "collapse_enabled_by_default must be a bool, "
                f"got {type(self.collapse_enabled_by_default).__name__}"
            )
            raise InvalidConfiguration(msg)

    @staticmethod
    def _require_int(name: str, value: object, *, minimum: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"{name} must be an integer, got {type(value).__name__}"
            raise InvalidConfiguration(msg)
        if value < minimum:
            msg = f"{name} must be >= {minimum}, got {value}"
            raise InvalidConfiguration(msg)

    @property
    def collapse_threshold(self) -> int:
        """Minimum length of an unchanged run that collapses."""
        return 2 * self.context_lines + self.min_collapse_threshold

    @classmethod
    def from_mapping(cls, options: Mapping[str, object]) -> CollapseConfig:
        """Build a config from host options, falling back to defaults.

        Unknown keys and invalid values are logged and the default
        configuration is returned instead.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            logger.warning("config_unknown_options", options=unknown)
            return cls()
        try:
            return cls(**options)  # type: ignore[arg-type]
        except InvalidConfiguration as exc:
            logger.warning("config_invalid_using_defaults", error=str(exc))
            return cls()
