"""Configuration for the analysis engine and the hook scanner service.

Defaults suit the packaged query set. Every field can be overridden in code;
the most common ones can also be set through ``HOOKWARDEN_*`` environment
variables via ``EngineConfig.from_env()`` / ``ScannerConfig.from_env()``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from hookwarden.core.languages import Language
from hookwarden.exceptions import ConfigurationError

DEFAULT_QUERY_DIR: Path = Path(__file__).resolve().parent / "queries"

DEFAULT_SNIPPET_LENGTH = 140

DEFAULT_MAX_CONTENT_BYTES = 1024 * 1024

DEFAULT_MAX_WORKERS = 8

# Grammar distribution per language: (importable module, factory function).
DEFAULT_GRAMMAR_MODULES: dict[Language, tuple[str, str]] = {
    Language.PYTHON: ("tree_sitter_python", "language"),
    Language.BASH: ("tree_sitter_bash", "language"),
    Language.JAVASCRIPT: ("tree_sitter_javascript", "language"),
    Language.TYPESCRIPT: ("tree_sitter_typescript", "language_typescript"),
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class EngineConfig:
    """Settings for ``HookAnalysisEngine``.

    Attributes:
        query_dir: Root of the per-language ``*.scm`` query directories.
        snippet_length: Maximum characters kept in a finding snippet.
        retry_unavailable: Re-attempt runtime/grammar loading on every scan
            after a failure instead of remembering the failure.
        grammar_modules: Grammar module and factory name per language.
    """

    query_dir: Path = DEFAULT_QUERY_DIR
    snippet_length: int = DEFAULT_SNIPPET_LENGTH
    retry_unavailable: bool = False
    grammar_modules: Mapping[Language, tuple[str, str]] = field(
        default_factory=lambda: dict(DEFAULT_GRAMMAR_MODULES)
    )

    def validate(self) -> None:
        """Check the configuration, raising ``ConfigurationError`` on problems."""
        if not Path(self.query_dir).is_dir():
            raise ConfigurationError(f"Query directory does not exist: {self.query_dir}")
        if self.snippet_length <= 0:
            raise ConfigurationError(
                f"snippet_length must be positive, got {self.snippet_length}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        env = os.environ if environ is None else environ
        query_dir = env.get("HOOKWARDEN_QUERY_DIR")
        return cls(
            query_dir=Path(query_dir).expanduser() if query_dir else DEFAULT_QUERY_DIR,
            snippet_length=_env_int(env, "HOOKWARDEN_SNIPPET_LENGTH", DEFAULT_SNIPPET_LENGTH),
            retry_unavailable=_env_bool(env, "HOOKWARDEN_RETRY_UNAVAILABLE", False),
        )


@dataclass(frozen=True)
class ScannerConfig:
    """Settings for the ``HookScanner`` service layer.

    Attributes:
        max_content_bytes: Hooks larger than this skip the syntax-tree engine
            and are assessed by the heuristic scanner only.
        max_workers: Thread pool size for concurrent hook scans.
    """

    max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES
    max_workers: int = DEFAULT_MAX_WORKERS

    def validate(self) -> None:
        if self.max_content_bytes <= 0:
            raise ConfigurationError("max_content_bytes must be positive")
        if self.max_workers <= 0:
            raise ConfigurationError("max_workers must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ScannerConfig:
        env = os.environ if environ is None else environ
        return cls(
            max_content_bytes=_env_int(
                env, "HOOKWARDEN_MAX_CONTENT_BYTES", DEFAULT_MAX_CONTENT_BYTES
            ),
            max_workers=_env_int(env, "HOOKWARDEN_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        )
