"""Syntax-tree based safety analysis engine for hook scripts.

``HookAnalysisEngine`` wires the pipeline together::

    resolve_language -> GrammarLoader -> QueryRepository
                     -> PatternMatcher -> SeverityScorer -> ScanResult

Any step can end the scan early with a ``NoOpinion`` value: no resolvable
language, no tree-sitter runtime, no grammar, or no compiled queries. Those
are ordinary outcomes, never exceptions, so hosts can route the hook to the
heuristic scanner.

The engine owns its caches. Hosts construct one engine and share it; tests
build a fresh engine per case. The engine is thread-safe: first-time cache
initialization is single-flight, and everything else is per-call.

Usage::

    engine = HookAnalysisEngine()
    result = engine.scan(source, filename="pre_tool_use.py")
    if not result:
        ...  # NoOpinion: fall back
    elif result.risk_score >= 70:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from hookwarden.config import EngineConfig
from hookwarden.core.grammar import GrammarLoader
from hookwarden.core.languages import Language, detect_language_from_shebang, resolve_language
from hookwarden.core.matcher import PatternMatcher, encode_source
from hookwarden.core.models import NoOpinion, NoOpinionReason, ScanRequest, ScanResult
from hookwarden.core.queries import QueryRepository
from hookwarden.core.scorer import SeverityScorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineAvailability:
    """Outcome of negotiating the optional tree-sitter dependency.

    Attributes:
        available: True if at least one language can be analyzed.
        reason: Why the engine is unavailable, or None.
        languages: Languages with a loaded grammar and a non-empty query set.
    """

    available: bool
    reason: NoOpinionReason | None = None
    languages: tuple[Language, ...] = field(default_factory=tuple)

    def supports(self, lang: Language) -> bool:
        return lang in self.languages


class HookAnalysisEngine:
    """Static safety analyzer for hook scripts.

    Args:
        config: Engine configuration. Defaults to ``EngineConfig()``.
        loader: Grammar loader; built from ``config`` when omitted.

    Raises:
        ConfigurationError: If ``config`` is invalid (e.g. the query
            directory does not exist).
    """

    def __init__(self, config: EngineConfig | None = None, loader: GrammarLoader | None = None) -> None:
        self._config = config or EngineConfig()
        self._config.validate()
        self._loader = loader or GrammarLoader(
            grammar_modules=self._config.grammar_modules,
            retry_unavailable=self._config.retry_unavailable,
        )
        self._queries = QueryRepository(self._loader, self._config.query_dir)
        self._scorer = SeverityScorer()
        self._matcher: PatternMatcher | None = None

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def loader(self) -> GrammarLoader:
        return self._loader

    @property
    def queries(self) -> QueryRepository:
        return self._queries

    def availability(self) -> EngineAvailability:
        """Check the runtime and every language, loading what is installed."""
        if not self._loader.ensure_runtime_ready():
            return EngineAvailability(False, NoOpinionReason.RUNTIME_UNAVAILABLE)
        languages = tuple(
            lang for lang in Language
            if self._loader.load_grammar(lang) is not None
            and not self._queries.get_queries(lang).is_empty
        )
        if not languages:
            return EngineAvailability(False, NoOpinionReason.GRAMMAR_UNAVAILABLE)
        return EngineAvailability(True, None, languages)

    def scan(
        self,
        content: str,
        *,
        language: Language | str | None = None,
        filename: str | None = None,
    ) -> ScanResult | NoOpinion:
        """Assess one hook script.

        Args:
            content: Hook source text.
            language: Explicit language; wins over ``filename``.
            filename: Used to detect the language from its extension.

        Returns:
            A ``ScanResult``, or ``NoOpinion`` when the hook cannot be
            assessed in this environment.

        Raises:
            ValueError: If ``language`` is a string naming no language.
        """
        lang = resolve_language(language, filename)
        if lang is None:
            lang = detect_language_from_shebang(content)
        if lang is None:
            return NoOpinion(NoOpinionReason.UNSUPPORTED_LANGUAGE,
                             f"cannot determine language of {filename or '<inline hook>'}")
        return self.scan_request(ScanRequest(content=content, language=lang, filename=filename))

    def scan_request(self, request: ScanRequest) -> ScanResult | NoOpinion:
        """Assess a ``ScanRequest`` whose language is already resolved."""
        lang = request.language
        if lang is None:
            return NoOpinion(NoOpinionReason.UNSUPPORTED_LANGUAGE, "no language given")

        if not self._loader.ensure_runtime_ready():
            return NoOpinion(NoOpinionReason.RUNTIME_UNAVAILABLE, "tree-sitter is not installed")
        grammar = self._loader.load_grammar(lang)
        if grammar is None:
            return NoOpinion(NoOpinionReason.GRAMMAR_UNAVAILABLE,
                             f"no {lang.value} grammar available")
        query_set = self._queries.get_queries(lang)
        if query_set.is_empty:
            return NoOpinion(NoOpinionReason.NO_QUERIES, f"no {lang.value} queries compiled")

        matcher = self._get_matcher()
        source = encode_source(request.content)
        tree = matcher.parse(source, grammar)
        captures = matcher.match(tree, query_set, source)
        report = self._scorer.score(captures)
        logger.debug(
            "Scanned %s (%s): %d captures, score %d",
            request.filename or "<inline hook>", lang.value, len(captures), report.risk_score,
        )
        return report.to_result()

    def _get_matcher(self) -> PatternMatcher:
        # Only reached after ensure_runtime_ready() succeeded. Two threads may
        # race to build one; both instances are equivalent and stateless.
        if self._matcher is None:
            self._matcher = PatternMatcher(self._loader.runtime, self._config.snippet_length)
        return self._matcher

    def reset(self) -> None:
        """Clear grammar and query caches. Intended for tests."""
        self._queries.reset()
        self._loader.reset()
        self._matcher = None
