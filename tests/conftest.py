"""Shared test fixtures for split-diff."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import structlog

from split_diff.core.models import TextRevision

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


def numbered_lines(count: int, *, prefix: str = "line") -> list[str]:
    """Return ``count`` distinct lines: ``line 0``, ``line 1``, ..."""
    return [f"{prefix} {i}" for i in range(count)]


@pytest.fixture
def identical_revisions() -> tuple[TextRevision, TextRevision]:
    """Two identical 50-line revisions."""
    lines = numbered_lines(50)
    return (
        TextRevision(lines, label="base.txt"),
        TextRevision(list(lines), label="target.txt"),
    )


@pytest.fixture
def single_change_revisions() -> tuple[TextRevision, TextRevision]:
    """A 20-line pair whose only difference is line 10.

    The unchanged run before the change (lines 0-9) is long enough to
    collapse with default settings; the run after it (lines 11-19) is not.
    """
    base = numbered_lines(20)
    target = list(base)
    target[10] = "changed line 10"
    return TextRevision(base, label="base.txt"), TextRevision(target, label="target.txt")


@pytest.fixture
def interior_run_revisions() -> tuple[TextRevision, TextRevision]:
    """Changes at both ends with a 100-line unchanged run between them."""
    middle = numbered_lines(100, prefix="shared")
    base = ["old head", *middle, "old tail"]
    target = ["new head", *middle, "new tail"]
    return TextRevision(base, label="base.txt"), TextRevision(target, label="target.txt")


@pytest.fixture
def sample_text_files(tmp_path: Path) -> tuple[Path, Path]:
    """Create two text files with a known single-line difference.

    Left:  line 1 / line 2 / line 3
    Right: line 1 / changed line 2 / line 3
    """
    left = tmp_path / "left.txt"
    right = tmp_path / "right.txt"
    left.write_text("line 1\nline 2\nline 3\n")
    right.write_text("line 1\nchanged line 2\nline 3\n")
    return left, right


@pytest.fixture
def long_text_files(tmp_path: Path) -> tuple[Path, Path]:
    """Create two 20-line files differing only at line 10 (0-indexed)."""
    left = tmp_path / "left.txt"
    right = tmp_path / "right.txt"
    lines = numbered_lines(20)
    left.write_text("\n".join(lines) + "\n")
    lines[10] = "changed line 10"
    right.write_text("\n".join(lines) + "\n")
    return left, right


@pytest.fixture
def binary_files(tmp_path: Path) -> tuple[Path, Path]:
    """Create two different binary files containing null bytes."""
    left = tmp_path / "left.bin"
    right = tmp_path / "right.bin"
    left.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    right.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00")
    return left, right


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo logging configuration done by the CLI under test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
