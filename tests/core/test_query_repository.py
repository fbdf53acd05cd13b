"""Tests for QueryRepository discovery, compilation, caching and validation.

The fake runtime from ``conftest`` compiles any source except ones that
contain ``BROKEN``, which lets these tests exercise every skip path without
depending on a real grammar's node types.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from hookwarden.core.grammar import GrammarLoader
from hookwarden.core.languages import Language
from hookwarden.core.queries import QueryRepository, compile_query
from hookwarden.exceptions import QueryCompileError

EXEC_QUERY = "((call function: (identifier) @fn) @danger.exec (#eq? @fn \"system\"))\n"
NET_QUERY = "((call) @warn.net)\n"


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def repository(fake_modules, importer_factory, query_dir: Path) -> QueryRepository:
    loader = GrammarLoader(importer=importer_factory(fake_modules))
    return QueryRepository(loader, query_dir)


class TestQueryDiscovery:
    def test_files_sorted_by_name(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "python", "b_second.scm", NET_QUERY)
        _write(query_dir / "python", "a_first.scm", EXEC_QUERY)
        _write(query_dir / "python", "README.md", "not a query")
        names = [p.name for p in repository.query_files(Language.PYTHON)]
        assert names == ["a_first.scm", "b_second.scm"]

    def test_typescript_reuses_javascript_first(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "typescript", "a_ts.scm", NET_QUERY)
        _write(query_dir / "javascript", "z_js.scm", NET_QUERY)
        files = repository.query_files(Language.TYPESCRIPT)
        assert [(p.parent.name, p.name) for p in files] == [
            ("javascript", "z_js.scm"),
            ("typescript", "a_ts.scm"),
        ]

    def test_missing_language_directory(self, repository: QueryRepository, query_dir: Path) -> None:
        (query_dir / "bash").rmdir()
        assert repository.query_files(Language.BASH) == []


class TestGetQueries:
    def test_compiles_in_order(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "python", "b.scm", NET_QUERY)
        _write(query_dir / "python", "a.scm", EXEC_QUERY)
        query_set = repository.get_queries(Language.PYTHON)
        assert [q.name for q in query_set] == ["python/a", "python/b"]
        assert query_set.queries[0].taxonomy_captures == ("danger.exec",)

    def test_malformed_query_is_skipped(
        self, repository: QueryRepository, query_dir: Path, caplog
    ) -> None:
        _write(query_dir / "python", "a.scm", EXEC_QUERY)
        _write(query_dir / "python", "b.scm", "((call) @danger.eval BROKEN")
        _write(query_dir / "python", "c.scm", NET_QUERY)
        with caplog.at_level(logging.WARNING, logger="hookwarden.core.queries"):
            query_set = repository.get_queries(Language.PYTHON)
        assert [q.name for q in query_set] == ["python/a", "python/c"]
        assert any("python/b" in r.getMessage() for r in caplog.records)

    def test_empty_file_is_skipped(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "python", "a.scm", "  \n\n")
        _write(query_dir / "python", "b.scm", NET_QUERY)
        assert len(repository.get_queries(Language.PYTHON)) == 1

    def test_query_without_taxonomy_capture_is_skipped(
        self, repository: QueryRepository, query_dir: Path
    ) -> None:
        _write(query_dir / "python", "a.scm", "((call) @func)")
        assert repository.get_queries(Language.PYTHON).is_empty

    def test_result_is_cached(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "python", "a.scm", EXEC_QUERY)
        first = repository.get_queries(Language.PYTHON)
        _write(query_dir / "python", "b.scm", NET_QUERY)
        assert repository.get_queries(Language.PYTHON) is first
        repository.reset()
        assert len(repository.get_queries(Language.PYTHON)) == 2

    def test_missing_grammar_is_not_cached(
        self, fake_modules, importer_factory, query_dir: Path
    ) -> None:
        grammar = fake_modules.pop("tree_sitter_bash")
        importer = importer_factory(fake_modules)
        repository = QueryRepository(GrammarLoader(importer=importer, retry_unavailable=True), query_dir)
        _write(query_dir / "bash", "a.scm", "((command) @danger.exec)")
        assert repository.get_queries(Language.BASH).is_empty
        importer.modules["tree_sitter_bash"] = grammar
        assert len(repository.get_queries(Language.BASH)) == 1


class TestCompileQuery:
    def test_compile_error_carries_name(self, fake_modules, importer_factory) -> None:
        loader = GrammarLoader(importer=importer_factory(fake_modules))
        grammar = loader.load_grammar(Language.PYTHON)
        with pytest.raises(QueryCompileError) as excinfo:
            compile_query(loader.runtime, grammar, "python/bad", "(BROKEN")
        assert excinfo.value.query_name == "python/bad"
        assert "Invalid syntax" in excinfo.value.reason


class TestValidate:
    def test_report(self, repository: QueryRepository, query_dir: Path) -> None:
        _write(query_dir / "python", "a.scm", EXEC_QUERY)
        _write(query_dir / "python", "b.scm", "((call) @danger.eval BROKEN")
        _write(query_dir / "python", "c.scm", "")
        _write(query_dir / "python", "d.scm", "((call) @weird @warn.net)")
        _write(query_dir / "python", "e.scm", "((call) @func)")

        report = repository.validate(Language.PYTHON)
        by_name = {f.name: f for f in report.files}

        assert report.grammar_available
        assert by_name["python/a"].compiled
        assert by_name["python/a"].capture_count == 2
        assert not by_name["python/b"].compiled
        assert by_name["python/b"].error
        assert by_name["python/c"].empty
        assert by_name["python/d"].unusual_captures == ["weird"]
        assert by_name["python/e"].missing_taxonomy_capture
        assert report.error_count == 1
        assert report.compiled_count == 3
        assert report.warning_count == 3

    def test_report_without_grammar(self, fake_modules, importer_factory, query_dir: Path) -> None:
        del fake_modules["tree_sitter_python"]
        repository = QueryRepository(GrammarLoader(importer=importer_factory(fake_modules)), query_dir)
        report = repository.validate(Language.PYTHON)
        assert not report.grammar_available
        assert report.files == []
        assert report.warning_count == 1
