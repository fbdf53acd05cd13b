"""hookwarden: Static safety analysis for lifecycle hook scripts."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

__version__ = "0.1.0"
__license__ = "MIT"

if TYPE_CHECKING:
    from hookwarden.core.languages import Language
    from hookwarden.core.models import NoOpinion, ScanResult

_default_engine = None
_default_engine_lock = threading.Lock()


def default_engine():
    """Return the process-wide engine used by :func:`scan`.

    Hosts that want isolated caches should construct their own
    ``HookAnalysisEngine`` instead.
    """
    global _default_engine
    if _default_engine is None:
        with _default_engine_lock:
            if _default_engine is None:
                from hookwarden.core.engine import HookAnalysisEngine

                _default_engine = HookAnalysisEngine()
    return _default_engine


def scan(
    content: str,
    *,
    language: Language | str | None = None,
    filename: str | None = None,
) -> ScanResult | NoOpinion:
    """Scan hook source with the default engine."""
    return default_engine().scan(content, language=language, filename=filename)


__all__ = ["__version__", "default_engine", "scan"]
