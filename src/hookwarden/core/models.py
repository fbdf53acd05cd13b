"""Data models for the hook analyzer: captures, scan results, and NoOpinion.

These are the values produced and consumed by the analysis pipeline. They
are intentionally decoupled from the engine so that the scanner service and
CLI formatters can import them without pulling in tree-sitter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hookwarden.core.languages import Language
from hookwarden.core.taxonomy import Capability


# ---------------------------------------------------------------------------
# ScanRequest: What the caller asked for
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanRequest:
    """One hook to analyze. ``language`` wins over ``filename`` when both are set."""

    content: str
    language: Language | None = None
    filename: str | None = None


# ---------------------------------------------------------------------------
# Capture: One query match
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Capture:
    """A syntax-tree node matched by a security query.

    Attributes:
        taxonomy_name: The risk capture name, e.g. ``danger.exec``.
        start_index: Byte offset where the node starts (inclusive).
        end_index: Byte offset where the node ends (exclusive).
        line: 1-based line of the node start.
        column: 1-based column of the node start.
        snippet: Whitespace-collapsed, length-bounded source text.
    """

    taxonomy_name: str
    start_index: int
    end_index: int
    line: int
    column: int
    snippet: str

    @property
    def byte_range(self) -> tuple[int, int]:
        return (self.start_index, self.end_index)

    def overlaps(self, start: int, end: int) -> bool:
        """True if ``[start, end)`` shares at least one byte with this capture.

        Zero-width ranges overlap only an identical zero-width range.
        """
        if self.start_index == self.end_index or start == end:
            return (self.start_index, self.end_index) == (start, end)
        return self.start_index < end and start < self.end_index

    def format_finding(self) -> str:
        """Render the human-readable finding string for this capture."""
        return f"{self.taxonomy_name} at {self.line}:{self.column}: {self.snippet}"


# ---------------------------------------------------------------------------
# ScanResult: Complete output of one scan
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanResult:
    """The risk assessment of a single hook.

    Attributes:
        has_file_system_access: A finding implies file system access.
        has_network_access: A finding implies network access.
        has_process_execution: A finding implies running processes or code.
        has_dangerous_imports: A finding is a dangerous import.
        has_credential_access: A finding reads credentials or secrets.
        findings: Ordered, duplicate-free finding strings.
        risk_score: Aggregate risk in ``[0, 100]``.
    """

    has_file_system_access: bool = False
    has_network_access: bool = False
    has_process_execution: bool = False
    has_dangerous_imports: bool = False
    has_credential_access: bool = False
    findings: tuple[str, ...] = field(default_factory=tuple)
    risk_score: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.risk_score <= 100:
            raise ValueError(f"risk_score must be within [0, 100], got {self.risk_score}")

    @classmethod
    def empty(cls) -> ScanResult:
        """A result with no findings, no flags, and a zero score."""
        return cls()

    @classmethod
    def from_capabilities(
        cls,
        capabilities: Capability,
        findings: tuple[str, ...],
        risk_score: int,
    ) -> ScanResult:
        return cls(
            has_file_system_access=bool(capabilities & Capability.FILE_SYSTEM),
            has_network_access=bool(capabilities & Capability.NETWORK),
            has_process_execution=bool(capabilities & Capability.PROCESS_EXECUTION),
            has_dangerous_imports=bool(capabilities & Capability.DANGEROUS_IMPORTS),
            has_credential_access=bool(capabilities & Capability.CREDENTIAL_ACCESS),
            findings=findings,
            risk_score=risk_score,
        )

    @property
    def capabilities(self) -> Capability:
        caps = Capability.NONE
        if self.has_file_system_access:
            caps |= Capability.FILE_SYSTEM
        if self.has_network_access:
            caps |= Capability.NETWORK
        if self.has_process_execution:
            caps |= Capability.PROCESS_EXECUTION
        if self.has_dangerous_imports:
            caps |= Capability.DANGEROUS_IMPORTS
        if self.has_credential_access:
            caps |= Capability.CREDENTIAL_ACCESS
        return caps

    @property
    def is_clean(self) -> bool:
        return self.risk_score == 0 and not self.findings

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable form, using the external camelCase field names."""
        return {
            "hasFileSystemAccess": self.has_file_system_access,
            "hasNetworkAccess": self.has_network_access,
            "hasProcessExecution": self.has_process_execution,
            "hasDangerousImports": self.has_dangerous_imports,
            "hasCredentialAccess": self.has_credential_access,
            "findings": list(self.findings),
            "riskScore": self.risk_score,
        }


# ---------------------------------------------------------------------------
# NoOpinion: The "cannot assess" outcome
# ---------------------------------------------------------------------------


class NoOpinionReason(Enum):
    """Why the engine declined to assess a hook."""

    UNSUPPORTED_LANGUAGE = "unsupported_language"
    RUNTIME_UNAVAILABLE = "runtime_unavailable"
    GRAMMAR_UNAVAILABLE = "grammar_unavailable"
    NO_QUERIES = "no_queries"


@dataclass(frozen=True)
class NoOpinion:
    """Returned instead of a ``ScanResult`` when the engine cannot assess a hook.

    This is a normal outcome, not an error. It is falsy so callers can write::

        result = engine.scan(content, filename=name)
        if not result:
            result = fallback.scan(content)
    """

    reason: NoOpinionReason
    detail: str = ""

    def __bool__(self) -> bool:
        return False
