"""hookwarden exception hierarchy.

All public exceptions inherit from HookwardenError, giving callers a single
base class to catch when they want to handle any hookwarden-specific failure
without swallowing unrelated errors.

"Cannot form an opinion" conditions (unsupported language, missing
tree-sitter runtime or grammar) are never exceptions: the engine returns a
``NoOpinion`` value for those.
"""


class HookwardenError(Exception):
    """Base exception for all hookwarden errors."""


class ConfigurationError(HookwardenError):
    """Raised when engine or scanner configuration is invalid.

    Covers query directories that do not exist, non-positive limits, and
    malformed values read from ``HOOKWARDEN_*`` environment variables.
    """


class EngineStateError(HookwardenError):
    """Raised when an internal API is used out of order.

    For example compiling queries before the tree-sitter runtime has been
    initialized, or parsing without a loaded grammar.
    """


class QueryCompileError(HookwardenError):
    """Raised when a single security query cannot be compiled.

    The query repository catches this per file and skips the offending
    query so the rest of the set still loads.
    """

    def __init__(self, query_name: str, reason: str) -> None:
        super().__init__(f"{query_name}: {reason}")
        self.query_name = query_name
        self.reason = reason


class SettingsError(HookwardenError):
    """Raised when a hook settings document has the wrong shape."""


class HookReadError(HookwardenError):
    """Raised when a hook script cannot be read from disk."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: cannot read hook ({reason})")
        self.path = path
        self.reason = reason
