"""Discovery, compilation, and caching of the declarative security queries.

Queries are tree-sitter S-expression patterns stored one query per ``.scm``
file under ``<query_dir>/<language>/``. Files are read in sorted filename
order so compilation and match order are deterministic.

Every query marks the risky construct with a capture from the risk taxonomy
(``@danger.*``, ``@warn.*``, ``@taint.*``); any other captures it declares
(``@mod``, ``@func``, ...) exist only to feed predicates such as ``#eq?`` and
are ignored by the matcher.

A file that fails to compile is logged and skipped; it never prevents the
rest of the set from loading.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hookwarden.core.grammar import GrammarHandle, GrammarLoader
from hookwarden.core.languages import Language
from hookwarden.core.taxonomy import is_taxonomy_name
from hookwarden.exceptions import EngineStateError, QueryCompileError

logger = logging.getLogger(__name__)

QUERY_SUFFIX = ".scm"

# Languages whose grammar is a superset of another's reuse that language's
# queries first, then their own directory.
QUERY_INHERITANCE: dict[Language, tuple[Language, ...]] = {
    Language.TYPESCRIPT: (Language.JAVASCRIPT,),
}

# Helper captures that feed predicates; anything else outside the taxonomy
# is reported as unusual by ``validate()``.
KNOWN_HELPER_CAPTURES: frozenset[str] = frozenset({
    "arg", "attr", "cmd", "ctor", "dl", "exp", "flag", "fn", "func", "key",
    "key_var", "kwarg", "method", "mod", "mode", "module", "name", "obj",
    "path", "prop", "sh", "target", "var",
})


@dataclass(frozen=True)
class CompiledQuery:
    """One compiled security query.

    Attributes:
        name: Query identifier, ``<language>/<file stem>``.
        query: The compiled ``tree_sitter.Query``.
        capture_names: All capture names the query declares.
    """

    name: str
    query: Any
    capture_names: tuple[str, ...]

    @property
    def taxonomy_captures(self) -> tuple[str, ...]:
        return tuple(n for n in self.capture_names if is_taxonomy_name(n))


@dataclass(frozen=True)
class CompiledQuerySet:
    """Ordered compiled queries for one language."""

    language: Language
    queries: tuple[CompiledQuery, ...] = ()

    def __len__(self) -> int:
        return len(self.queries)

    def __iter__(self):
        return iter(self.queries)

    @property
    def is_empty(self) -> bool:
        return not self.queries


@dataclass
class QueryFileReport:
    """Validation outcome for a single query file."""

    name: str
    compiled: bool
    capture_count: int = 0
    error: str | None = None
    empty: bool = False
    unusual_captures: list[str] = field(default_factory=list)
    missing_taxonomy_capture: bool = False


@dataclass
class QueryValidationReport:
    """Validation outcome for every query file of one language."""

    language: Language
    grammar_available: bool
    files: list[QueryFileReport] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.files if not f.compiled and not f.empty)

    @property
    def compiled_count(self) -> int:
        return sum(1 for f in self.files if f.compiled)

    @property
    def warning_count(self) -> int:
        warnings = sum(
            len(f.unusual_captures) + int(f.missing_taxonomy_capture) + int(f.empty)
            for f in self.files
        )
        if not self.grammar_available:
            warnings += 1
        return warnings


def compile_query(runtime: Any, grammar: GrammarHandle, name: str, source: str) -> CompiledQuery:
    """Compile one query source against a grammar.

    Raises:
        QueryCompileError: If tree-sitter rejects the pattern.
    """
    try:
        query = runtime.Query(grammar.ts_language, source)
    except runtime.QueryError as exc:
        raise QueryCompileError(name, str(exc)) from exc
    capture_names = tuple(query.capture_name(i) for i in range(query.capture_count))
    return CompiledQuery(name=name, query=query, capture_names=capture_names)


class QueryRepository:
    """Compiles and caches the security query set of each language.

    Args:
        loader: Grammar loader providing the runtime and grammars.
        query_dir: Root directory holding one subdirectory per language.
    """

    def __init__(self, loader: GrammarLoader, query_dir: Path) -> None:
        self._loader = loader
        self._query_dir = Path(query_dir)
        self._cache: dict[Language, CompiledQuerySet] = {}
        self._locks: dict[Language, threading.Lock] = {
            lang: threading.Lock() for lang in Language
        }

    @property
    def query_dir(self) -> Path:
        return self._query_dir

    def query_files(self, lang: Language) -> list[Path]:
        """Query files for ``lang`` in compilation order."""
        files: list[Path] = []
        for source_lang in (*QUERY_INHERITANCE.get(lang, ()), lang):
            directory = self._query_dir / source_lang.value
            if not directory.is_dir():
                continue
            files.extend(
                sorted(
                    (p for p in directory.iterdir()
                     if p.is_file() and p.suffix == QUERY_SUFFIX),
                    key=lambda p: p.name,
                )
            )
        return files

    def get_queries(self, lang: Language) -> CompiledQuerySet:
        """Return the compiled query set for ``lang``, compiling on first use.

        Returns an empty set when the grammar is unavailable or no query
        compiles. Empty sets caused by a missing grammar are not cached so a
        later successful grammar load can still compile queries.

        Raises:
            EngineStateError: If the grammar is loaded but the runtime is not
                ready, which means the loader's state is corrupt.
        """
        cached = self._cache.get(lang)
        if cached is not None:
            return cached

        with self._locks[lang]:
            cached = self._cache.get(lang)
            if cached is not None:
                return cached

            grammar = self._loader.load_grammar(lang)
            if grammar is None:
                return CompiledQuerySet(language=lang)
            runtime = self._require_runtime()

            compiled: list[CompiledQuery] = []
            for path in self.query_files(lang):
                query = self._compile_file(runtime, grammar, path)
                if query is not None:
                    compiled.append(query)

            query_set = CompiledQuerySet(language=lang, queries=tuple(compiled))
            if query_set.is_empty:
                logger.warning("No security queries compiled for %s", lang.value)
            else:
                logger.debug("Compiled %d %s queries", len(query_set), lang.value)
            self._cache[lang] = query_set
            return query_set

    def _require_runtime(self) -> Any:
        runtime = self._loader.runtime
        if runtime is None:
            raise EngineStateError("Grammar loaded before the tree-sitter runtime was ready")
        return runtime

    def _compile_file(self, runtime: Any, grammar: GrammarHandle, path: Path) -> CompiledQuery | None:
        name = f"{path.parent.name}/{path.stem}"
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read query %s: %s", path, exc)
            return None
        if not source.strip():
            logger.debug("Skipping empty query file %s", path)
            return None
        try:
            query = compile_query(runtime, grammar, name, source)
        except QueryCompileError as exc:
            logger.warning("Skipping malformed query %s", exc)
            return None
        if not query.taxonomy_captures:
            logger.warning("Query %s declares no danger/warn/taint capture; skipping", name)
            return None
        return query

    def validate(self, lang: Language) -> QueryValidationReport:
        """Compile every query file of ``lang`` and report problems.

        Unlike ``get_queries()`` this neither caches nor skips silently: each
        file gets a ``QueryFileReport`` describing whether it compiled, its
        capture count, and any capture names outside the taxonomy and the
        known helper names.
        """
        grammar = self._loader.load_grammar(lang)
        report = QueryValidationReport(language=lang, grammar_available=grammar is not None)
        if grammar is None:
            return report
        runtime = self._require_runtime()

        for path in self.query_files(lang):
            name = f"{path.parent.name}/{path.stem}"
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                report.files.append(QueryFileReport(name=name, compiled=False, error=str(exc)))
                continue
            if not source.strip():
                report.files.append(QueryFileReport(name=name, compiled=False, empty=True))
                continue
            try:
                query = compile_query(runtime, grammar, name, source)
            except QueryCompileError as exc:
                report.files.append(
                    QueryFileReport(name=name, compiled=False, error=exc.reason)
                )
                continue
            unusual = [
                c for c in query.capture_names
                if not is_taxonomy_name(c) and c not in KNOWN_HELPER_CAPTURES
            ]
            report.files.append(QueryFileReport(
                name=name,
                compiled=True,
                capture_count=len(query.capture_names),
                unusual_captures=unusual,
                missing_taxonomy_capture=not query.taxonomy_captures,
            ))
        return report

    def reset(self) -> None:
        """Drop every cached query set. Intended for tests."""
        for lang, lock in self._locks.items():
            with lock:
                self._cache.pop(lang, None)
