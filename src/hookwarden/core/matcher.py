"""Parse hook source and turn query matches into ``Capture`` records."""

from __future__ import annotations

import re
from typing import Any

from hookwarden.config import DEFAULT_SNIPPET_LENGTH
from hookwarden.core.grammar import GrammarHandle
from hookwarden.core.models import Capture
from hookwarden.core.queries import CompiledQuerySet
from hookwarden.core.taxonomy import is_taxonomy_name
from hookwarden.exceptions import EngineStateError

_WHITESPACE_RE = re.compile(r"\s+")

ELLIPSIS = "..."


def encode_source(text: str) -> bytes:
    """UTF-8 bytes of hook source as handed to the parser.

    Unencodable code points such as lone surrogates (valid in a decoded JSON
    string) become ``?`` so every ``str`` yields a parseable byte buffer.
    """
    return text.encode("utf-8", errors="replace")


def normalize_snippet(text: str, limit: int = DEFAULT_SNIPPET_LENGTH) -> str:
    """Collapse whitespace runs to single spaces and cap the length."""
    collapsed = _WHITESPACE_RE.sub(" ", text).strip()
    if len(collapsed) <= limit:
        return collapsed
    if limit <= len(ELLIPSIS):
        return collapsed[:limit]
    return collapsed[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


class PatternMatcher:
    """Runs compiled queries over a syntax tree.

    The matcher reports every match it sees. Overlapping or duplicate
    ranges across queries are left for the scorer to deduplicate.
    """

    def __init__(self, runtime: Any, snippet_length: int = DEFAULT_SNIPPET_LENGTH) -> None:
        if runtime is None:
            raise EngineStateError("PatternMatcher needs an initialized tree-sitter runtime")
        self._runtime = runtime
        self._snippet_length = snippet_length

    def parse(self, source: bytes, grammar: GrammarHandle | None) -> Any:
        """Parse ``source`` into a tree.

        tree-sitter recovers from syntax errors by inserting ``ERROR`` nodes,
        so malformed hooks still yield a tree; queries simply do not match
        inside the broken region. A new parser is built per call because
        parsers carry mutable state.
        """
        if grammar is None:
            raise EngineStateError("Cannot parse without a loaded grammar")
        parser = self._runtime.Parser(grammar.ts_language)
        return parser.parse(source)

    def match(self, tree: Any, query_set: CompiledQuerySet, source: bytes) -> list[Capture]:
        """Collect one capture per query match, in query order then match order."""
        captures: list[Capture] = []
        root = tree.root_node
        for compiled in query_set:
            cursor = self._runtime.QueryCursor(compiled.query)
            for _pattern_index, captured in cursor.matches(root):
                capture = self._representative(captured, source)
                if capture is not None:
                    captures.append(capture)
        return captures

    def _representative(self, captured: dict[str, list[Any]], source: bytes) -> Capture | None:
        # The taxonomy capture locates the finding; helper captures only feed
        # predicates.
        for name, nodes in captured.items():
            if not nodes or not is_taxonomy_name(name):
                continue
            return self._to_capture(name, nodes[0], source)
        return None

    def _to_capture(self, name: str, node: Any, source: bytes) -> Capture:
        start, end = node.start_byte, node.end_byte
        row, column = node.start_point
        text = source[start:end].decode("utf-8", errors="replace")
        return Capture(
            taxonomy_name=name,
            start_index=start,
            end_index=end,
            line=row + 1,
            column=column + 1,
            snippet=normalize_snippet(text, self._snippet_length),
        )
