"""Tests for split_diff.cli.app."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from split_diff.cli.app import app
from split_diff.tui.app import SplitDiffApp

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

runner = CliRunner()


class TestCliHelp:
    """Verify help output."""

    def test_help_flag(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Compare two files side by side" in result.output

    def test_no_args_shows_usage(self) -> None:
        result = runner.invoke(app, [])
        assert "Usage" in result.output or "LEFT" in result.output


class TestCliVersion:
    """Verify version output."""

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "split-diff 0.1.0" in result.output

    def test_version_short_flag(self) -> None:
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert "split-diff" in result.output


class TestCliRichOutput:
    """Verify the default side-by-side table."""

    def test_default_is_rich(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right)])
        assert result.exit_code == 0
        assert "7 unchanged lines" in result.stdout
        assert "changed line 10" in result.stdout

    def test_no_collapse(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--no-collapse"])
        assert result.exit_code == 0
        assert "unchanged lines" not in result.stdout

    def test_context_and_threshold(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "-C", "1", "--threshold", "0"])
        assert result.exit_code == 0
        assert "9 unchanged lines" in result.stdout
        assert "8 unchanged lines" in result.stdout

    def test_max_count_caps_label(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--max-count", "5"])
        assert result.exit_code == 0
        assert "5+ unchanged lines" in result.stdout

    def test_invalid_context_falls_back_to_defaults(
        self, long_text_files: tuple[Path, Path]
    ) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--context", "0"])
        assert result.exit_code == 0
        assert "7 unchanged lines" in result.stdout

    def test_small_change_has_no_regions(self, sample_text_files: tuple[Path, Path]) -> None:
        left, right = sample_text_files
        result = runner.invoke(app, [str(left), str(right)])
        assert result.exit_code == 0
        assert "unchanged lines" not in result.stdout
        assert "changed line 2" in result.stdout


class TestCliOutputMode:
    """Verify output mode option."""

    def test_invalid_output_mode(self, sample_text_files: tuple[Path, Path]) -> None:
        left, right = sample_text_files
        result = runner.invoke(app, [str(left), str(right), "--output", "invalid"])
        assert result.exit_code != 0

    def test_json_output_is_valid_json(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--output", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert set(data) == {
            "base",
            "target",
            "available",
            "error",
            "collapse_enabled",
            "stats",
            "segments",
            "regions",
            "rows",
        }
        assert data["regions"][0]["line_count"] == 7

    def test_tui_mode_launches_app(
        self, sample_text_files: tuple[Path, Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        launched: list[SplitDiffApp] = []
        monkeypatch.setattr(SplitDiffApp, "run", lambda self, *a, **kw: launched.append(self))
        left, right = sample_text_files
        result = runner.invoke(app, [str(left), str(right), "--output", "tui"])
        assert result.exit_code == 0
        assert len(launched) == 1
        assert launched[0].title == f"{left} vs {right}"


class TestCliStatFlag:
    """Verify --stat flag."""

    def test_stat_shows_summary(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--stat"])
        assert result.exit_code == 0
        assert "collapsible regions" in result.stdout
        assert "unchanged lines" not in result.stdout

    def test_json_stat_flag(self, long_text_files: tuple[Path, Path]) -> None:
        left, right = long_text_files
        result = runner.invoke(app, [str(left), str(right), "--output", "json", "--stat"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["added"] == 1
        assert data["hidden_lines"] == 7
        assert "rows" not in data


class TestCliErrors:
    """Verify error handling and exit codes."""

    def test_missing_file_exits_2(self, tmp_path: Path) -> None:
        existing = tmp_path / "a.txt"
        existing.write_text("a\n")
        result = runner.invoke(app, [str(existing), str(tmp_path / "missing.txt")])
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_directory_exits_2(self, tmp_path: Path) -> None:
        existing = tmp_path / "a.txt"
        existing.write_text("a\n")
        result = runner.invoke(app, [str(existing), str(tmp_path)])
        assert result.exit_code == 2
        assert "directory" in result.output

    def test_binary_file_exits_2(self, binary_files: tuple[Path, Path]) -> None:
        left, right = binary_files
        result = runner.invoke(app, [str(left), str(right)])
        assert result.exit_code == 2
        assert "binary" in result.output

    def test_invalid_log_level_exits_2(self, sample_text_files: tuple[Path, Path]) -> None:
        left, right = sample_text_files
        result = runner.invoke(app, [str(left), str(right), "--log-level", "loud"])
        assert result.exit_code == 2
        assert "Invalid log level" in result.output
