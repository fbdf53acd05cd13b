"""Tests for ``hookwarden queries`` and ``hookwarden languages``."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from hookwarden import __version__
from hookwarden.cli.main import cli


@pytest.fixture
def python_queries(query_dir: Path) -> Path:
    pytest.importorskip("tree_sitter")
    pytest.importorskip("tree_sitter_python")
    (query_dir / "python" / "a_ok.scm").write_text("((call) @danger.exec)\n")
    return query_dir


class TestQueriesCommand:
    def test_valid_queries_exit_0(self, runner: CliRunner, python_queries: Path) -> None:
        result = runner.invoke(
            cli, ["queries", "--language", "python", "--query-dir", str(python_queries)]
        )
        assert result.exit_code == 0
        assert "python/a_ok" in result.output

    def test_malformed_query_exit_1(self, runner: CliRunner, python_queries: Path) -> None:
        (python_queries / "python" / "b_bad.scm").write_text("((call @danger.exec\n")
        result = runner.invoke(
            cli, ["queries", "--language", "python", "--query-dir", str(python_queries)]
        )
        assert result.exit_code == 1
        assert "python/b_bad" in result.output
        assert "error" in result.output

    def test_unusual_capture_reported(self, runner: CliRunner, python_queries: Path) -> None:
        (python_queries / "python" / "c_odd.scm").write_text("((call) @weird @warn.net)\n")
        result = runner.invoke(
            cli, ["queries", "--language", "python", "--query-dir", str(python_queries)]
        )
        assert result.exit_code == 0
        assert "unusual capture @weird" in result.output

    @pytest.mark.parametrize("language", ["python", "bash", "javascript", "typescript"])
    def test_packaged_queries_compile(self, runner: CliRunner, language: str) -> None:
        pytest.importorskip("tree_sitter")
        pytest.importorskip(f"tree_sitter_{language}")
        result = runner.invoke(cli, ["queries", "--language", language])
        assert result.exit_code == 0, result.output
        assert "0 errors" in result.output


class TestMainGroup:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_languages_lists_every_language(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["languages"])
        assert result.exit_code == 0
        for name in ("python", "bash", "javascript", "typescript"):
            assert name in result.output
