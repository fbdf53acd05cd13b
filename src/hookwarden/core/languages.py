"""Language resolution for hook scripts.

Maps an explicit language request, a filename extension, or (as a last
resort) a shebang line to one of the supported ``Language`` members. No
guessing beyond that: an unresolvable hook makes the engine return
``NoOpinion`` so the caller can use the heuristic scanner instead.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import PurePath


class Language(Enum):
    """Languages the hook analyzer has grammars and queries for."""

    PYTHON = "python"
    BASH = "bash"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"

    @classmethod
    def parse(cls, value: Language | str) -> Language:
        """Return the member named by ``value`` or one of its short aliases.

        Raises:
            ValueError: If ``value`` names no supported language.
        """
        if isinstance(value, Language):
            return value
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unsupported hook language: {value!r}") from None


_ALIASES: dict[str, Language] = {
    "py": Language.PYTHON,
    "sh": Language.BASH,
    "shell": Language.BASH,
    "js": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "ts": Language.TYPESCRIPT,
}

EXTENSION_MAP: dict[str, Language] = {
    ".py": Language.PYTHON,
    ".sh": Language.BASH,
    ".bash": Language.BASH,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
}

_SHEBANG_INTERPRETERS: dict[str, Language] = {
    "python": Language.PYTHON,
    "bash": Language.BASH,
    "sh": Language.BASH,
    "zsh": Language.BASH,
    "dash": Language.BASH,
    "node": Language.JAVASCRIPT,
    "deno": Language.TYPESCRIPT,
    "ts-node": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
}

# "#!/usr/bin/env -S python3 -u" -> "python3"; "#!/bin/bash" -> "bash"
_SHEBANG_RE = re.compile(r"^#!\s*(\S+)(?:\s+(?:-\S+\s+)*(\S+))?")
_VERSION_SUFFIX_RE = re.compile(r"[\d.]+$")


def detect_language_from_filename(filename: str | None) -> Language | None:
    """Map a filename's extension to a language, or None."""
    if not filename:
        return None
    suffix = PurePath(filename).suffix.lower()
    return EXTENSION_MAP.get(suffix)


def detect_language_from_shebang(content: str) -> Language | None:
    """Map the interpreter named on a ``#!`` first line to a language."""
    if not content.startswith("#!"):
        return None
    first_line = content.split("\n", 1)[0]
    match = _SHEBANG_RE.match(first_line)
    if not match:
        return None
    program = PurePath(match.group(1)).name
    if program == "env" and match.group(2):
        program = PurePath(match.group(2)).name
    program = _VERSION_SUFFIX_RE.sub("", program) or program
    return _SHEBANG_INTERPRETERS.get(program)


def resolve_language(
    language: Language | str | None = None,
    filename: str | None = None,
) -> Language | None:
    """Resolve the language of a scan request.

    An explicit language always wins. Otherwise the filename extension is
    consulted. Returns None when neither yields a language.
    """
    if language is not None:
        return Language.parse(language)
    return detect_language_from_filename(filename)
