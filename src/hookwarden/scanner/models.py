"""Service-level models: risk levels and scanned hook files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from hookwarden.core.models import ScanResult

WARNING_THRESHOLD = 30
DANGEROUS_THRESHOLD = 70


class RiskLevel(IntEnum):
    """Three display tiers for a risk score. Ordered: SAFE < WARNING < DANGEROUS."""

    SAFE = 1
    WARNING = 2
    DANGEROUS = 3

    @classmethod
    def from_score(cls, risk_score: int) -> RiskLevel:
        if risk_score >= DANGEROUS_THRESHOLD:
            return cls.DANGEROUS
        if risk_score >= WARNING_THRESHOLD:
            return cls.WARNING
        return cls.SAFE

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class HookFile:
    """A hook script on disk together with its assessment.

    Attributes:
        name: Display name, usually the file name.
        content: Hook source.
        event_type: Lifecycle event the hook is attached to, if known.
        description: Free-form description, if known.
        scan_result: The merged assessment.
        analyzed: False when the syntax-tree engine had no opinion and the
            result comes from the heuristic scanner alone.
    """

    name: str
    content: str
    scan_result: ScanResult
    event_type: str | None = None
    description: str | None = None
    analyzed: bool = True

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.from_score(self.scan_result.risk_score)
