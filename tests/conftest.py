"""Shared fixtures for hookwarden tests."""

from __future__ import annotations

import types
from pathlib import Path
from typing import Callable

import pytest

from hookwarden.core.engine import HookAnalysisEngine


# ---------------------------------------------------------------------------
# Fake tree-sitter runtime (no native code needed)
# ---------------------------------------------------------------------------


class FakeQueryError(Exception):
    """Stand-in for ``tree_sitter.QueryError``."""


class FakeLanguage:
    def __init__(self, pointer: object) -> None:
        if pointer == "bad-abi":
            raise ValueError("Incompatible Language version")
        self.pointer = pointer


class FakeQuery:
    """Compiles anything except sources containing ``BROKEN``.

    Capture names are the ``@name`` tokens of the source, in order.
    """

    def __init__(self, language: FakeLanguage, source: str) -> None:
        if "BROKEN" in source:
            raise FakeQueryError(f"Invalid syntax at offset {source.index('BROKEN')}")
        self.language = language
        self.source = source
        names: list[str] = []
        for token in source.replace(")", " ").replace("(", " ").split():
            if token.startswith("@") and token[1:] not in names:
                names.append(token[1:])
        self._names = names

    @property
    def capture_count(self) -> int:
        return len(self._names)

    def capture_name(self, index: int) -> str:
        return self._names[index]


class FakeParser:
    def __init__(self, language: FakeLanguage) -> None:
        self.language = language


class FakeQueryCursor:
    def __init__(self, query: FakeQuery) -> None:
        self.query = query

    def matches(self, node: object) -> list:
        return []


def make_fake_runtime() -> types.ModuleType:
    module = types.ModuleType("tree_sitter")
    module.Language = FakeLanguage
    module.Parser = FakeParser
    module.Query = FakeQuery
    module.QueryCursor = FakeQueryCursor
    module.QueryError = FakeQueryError
    return module


def make_grammar_module(name: str, pointer: object = "ptr", factory: str = "language") -> types.ModuleType:
    module = types.ModuleType(name)
    setattr(module, factory, lambda: pointer)
    return module


class RecordingImporter:
    """Module importer backed by a dict; records every import attempt."""

    def __init__(self, modules: dict[str, types.ModuleType]) -> None:
        self.modules = modules
        self.calls: list[str] = []

    def __call__(self, name: str) -> types.ModuleType:
        self.calls.append(name)
        if name not in self.modules:
            raise ModuleNotFoundError(f"No module named {name!r}")
        return self.modules[name]

    def count(self, name: str) -> int:
        return self.calls.count(name)


@pytest.fixture
def fake_modules() -> dict[str, types.ModuleType]:
    """A full set of fake runtime and grammar modules."""
    return {
        "tree_sitter": make_fake_runtime(),
        "tree_sitter_python": make_grammar_module("tree_sitter_python"),
        "tree_sitter_bash": make_grammar_module("tree_sitter_bash"),
        "tree_sitter_javascript": make_grammar_module("tree_sitter_javascript"),
        "tree_sitter_typescript": make_grammar_module(
            "tree_sitter_typescript", factory="language_typescript"
        ),
    }


@pytest.fixture
def importer_factory() -> Callable[[dict[str, types.ModuleType]], RecordingImporter]:
    return RecordingImporter


# ---------------------------------------------------------------------------
# Real engine (requires tree-sitter and the grammar wheels)
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> HookAnalysisEngine:
    """A fresh engine with the packaged queries; skips without tree-sitter."""
    pytest.importorskip("tree_sitter")
    pytest.importorskip("tree_sitter_python")
    pytest.importorskip("tree_sitter_bash")
    return HookAnalysisEngine()


@pytest.fixture
def query_dir(tmp_path: Path) -> Path:
    """An empty query directory with one subdirectory per language."""
    root = tmp_path / "queries"
    for lang in ("python", "bash", "javascript", "typescript"):
        (root / lang).mkdir(parents=True)
    return root


@pytest.fixture
def polyglot_engine(engine: HookAnalysisEngine) -> HookAnalysisEngine:
    """``engine`` plus the JavaScript and TypeScript grammars."""
    pytest.importorskip("tree_sitter_javascript")
    pytest.importorskip("tree_sitter_typescript")
    return engine
