"""Lazy, single-flight loading of the tree-sitter runtime and grammars.

The tree-sitter runtime and the per-language grammar distributions are
optional at install time. This module loads them on first use and reports
absence as a negative result (``False`` / ``None``) rather than an
exception, so the engine can answer ``NoOpinion`` and the caller can fall
back to the heuristic scanner.

State machines (per ``GrammarLoader`` instance)::

    runtime:   UNINITIALIZED -> READY | UNAVAILABLE
    grammar:   UNLOADED -> LOADED | UNAVAILABLE      (one per language)

Initialization is guarded by locks with double-checked reads: when several
threads race on a cold cache, one performs the import and the others block
until it finishes and then observe its outcome. Once READY/LOADED, reads are
lock-free.

Whether UNAVAILABLE is terminal depends on ``EngineConfig.retry_unavailable``.
By default a failure is remembered until ``reset()``; with retry enabled the
next call attempts the import again.
"""

from __future__ import annotations

import importlib
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Mapping

from hookwarden.config import DEFAULT_GRAMMAR_MODULES
from hookwarden.core.languages import Language

logger = logging.getLogger(__name__)

RUNTIME_MODULE = "tree_sitter"

# Names the matcher and query repository rely on.
_REQUIRED_RUNTIME_API: tuple[str, ...] = ("Language", "Parser", "Query", "QueryCursor", "QueryError")


class LoadState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class GrammarHandle:
    """A loaded grammar: the language it parses and the tree-sitter object."""

    language: Language
    ts_language: Any


class GrammarLoader:
    """Loads and memoizes the tree-sitter runtime and per-language grammars.

    Args:
        grammar_modules: ``(module, factory)`` per language. The module is
            imported and ``factory()`` must return the grammar pointer that
            ``tree_sitter.Language`` accepts.
        retry_unavailable: Retry failed loads on every call instead of
            remembering the failure.
        importer: Module import function; tests substitute a fake.
    """

    def __init__(
        self,
        grammar_modules: Mapping[Language, tuple[str, str]] | None = None,
        retry_unavailable: bool = False,
        importer: Callable[[str], ModuleType] = importlib.import_module,
    ) -> None:
        self._grammar_modules = dict(grammar_modules or DEFAULT_GRAMMAR_MODULES)
        self._retry_unavailable = retry_unavailable
        self._import = importer

        self._runtime_lock = threading.Lock()
        self._runtime_state = LoadState.UNINITIALIZED
        self._runtime: ModuleType | None = None

        self._grammar_locks: dict[Language, threading.Lock] = {
            lang: threading.Lock() for lang in Language
        }
        self._grammars: dict[Language, GrammarHandle] = {}
        self._unavailable: set[Language] = set()

        self._warned: set[str] = set()
        self._warn_lock = threading.Lock()

    # -- Runtime ----------------------------------------------------------

    @property
    def runtime_state(self) -> LoadState:
        return self._runtime_state

    @property
    def runtime(self) -> ModuleType | None:
        """The imported ``tree_sitter`` module once READY, else None."""
        return self._runtime

    def ensure_runtime_ready(self) -> bool:
        """Import the tree-sitter runtime at most once. Returns True if usable."""
        if self._runtime_state is LoadState.READY:
            return True
        if self._runtime_state is LoadState.UNAVAILABLE and not self._retry_unavailable:
            return False

        with self._runtime_lock:
            if self._runtime_state is LoadState.READY:
                return True
            if self._runtime_state is LoadState.UNAVAILABLE and not self._retry_unavailable:
                return False

            runtime = self._import_runtime()
            if runtime is None:
                self._runtime_state = LoadState.UNAVAILABLE
                return False
            self._runtime = runtime
            self._runtime_state = LoadState.READY
            logger.debug("tree-sitter runtime ready (%s)", getattr(runtime, "__file__", "?"))
            return True

    def _import_runtime(self) -> ModuleType | None:
        try:
            module = self._import(RUNTIME_MODULE)
        except ImportError as exc:
            self._warn_once("runtime", "tree-sitter runtime not installed: %s", exc)
            return None
        missing = [name for name in _REQUIRED_RUNTIME_API if not hasattr(module, name)]
        if missing:
            self._warn_once(
                "runtime",
                "tree-sitter runtime lacks %s; upgrade to py-tree-sitter >= 0.25",
                ", ".join(missing),
            )
            return None
        return module

    # -- Grammars ---------------------------------------------------------

    def is_loaded(self, lang: Language) -> bool:
        return lang in self._grammars

    def load_grammar(self, lang: Language) -> GrammarHandle | None:
        """Return the grammar for ``lang``, loading it on first use.

        Returns None when the runtime or this language's grammar module is
        unavailable. Other languages are unaffected.
        """
        handle = self._grammars.get(lang)
        if handle is not None:
            return handle
        if lang in self._unavailable and not self._retry_unavailable:
            return None
        if not self.ensure_runtime_ready():
            return None

        with self._grammar_locks[lang]:
            handle = self._grammars.get(lang)
            if handle is not None:
                return handle
            if lang in self._unavailable and not self._retry_unavailable:
                return None

            handle = self._import_grammar(lang)
            if handle is None:
                self._unavailable.add(lang)
                return None
            self._unavailable.discard(lang)
            self._grammars[lang] = handle
            logger.debug("Loaded %s grammar", lang.value)
            return handle

    def _import_grammar(self, lang: Language) -> GrammarHandle | None:
        entry = self._grammar_modules.get(lang)
        if entry is None:
            self._warn_once(lang.value, "No grammar module configured for %s", lang.value)
            return None
        module_name, factory_name = entry
        try:
            module = self._import(module_name)
        except ImportError as exc:
            self._warn_once(lang.value, "Grammar for %s not installed (%s): %s",
                            lang.value, module_name, exc)
            return None

        factory = getattr(module, factory_name, None)
        if not callable(factory):
            self._warn_once(lang.value, "Grammar module %s has no %s()", module_name, factory_name)
            return None
        try:
            ts_language = self._runtime.Language(factory())
        except (TypeError, ValueError) as exc:
            # Incompatible ABI version or a malformed grammar pointer.
            self._warn_once(lang.value, "Grammar %s failed to load: %s", module_name, exc)
            return None
        return GrammarHandle(language=lang, ts_language=ts_language)

    # -- Housekeeping -----------------------------------------------------

    def available_languages(self) -> list[Language]:
        """Load every configured grammar and return the ones that work."""
        return [lang for lang in Language if self.load_grammar(lang) is not None]

    def reset(self) -> None:
        """Forget all loaded and failed state. Intended for tests."""
        with self._runtime_lock:
            self._runtime_state = LoadState.UNINITIALIZED
            self._runtime = None
        for lang, lock in self._grammar_locks.items():
            with lock:
                self._grammars.pop(lang, None)
                self._unavailable.discard(lang)
        with self._warn_lock:
            self._warned.clear()

    def _warn_once(self, key: str, msg: str, *args: object) -> None:
        with self._warn_lock:
            if key in self._warned:
                logger.debug(msg, *args)
                return
            self._warned.add(key)
        logger.warning(msg, *args)
