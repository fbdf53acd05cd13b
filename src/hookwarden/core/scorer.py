"""Reduce captures to a capped risk score, capability flags, and findings.

Scoring rules:

1. Identical captures (same taxonomy name and byte range) collapse to one.
2. Captures are visited by descending weight, then source position. A
   capture whose ``[start, end)`` range overlaps a range that has already
   been scored adds nothing, so each stretch of source is counted once and
   at its most severe interpretation.
3. ``risk_score = min(sum of counted weights, 100)``.

Because selection is greedy over disjoint ranges, adding a construct whose
range is disjoint from every existing capture never removes a counted
weight: the score is monotonic non-decreasing until the cap.

Capability flags are the union of the capabilities of every deduplicated
capture's category, including captures that did not add weight. Findings
are listed in source order with duplicate strings removed.
"""

from __future__ import annotations

from dataclasses import dataclass

from hookwarden.core.models import Capture, ScanResult
from hookwarden.core.taxonomy import Capability, RiskCategory

MAX_RISK_SCORE = 100


@dataclass(frozen=True)
class ScoreReport:
    """Scorer output: the capped score, capability flags, and findings."""

    risk_score: int
    capabilities: Capability
    findings: tuple[str, ...]
    counted: tuple[Capture, ...] = ()

    def to_result(self) -> ScanResult:
        return ScanResult.from_capabilities(self.capabilities, self.findings, self.risk_score)


def _position_key(capture: Capture) -> tuple[int, int, str]:
    return (capture.start_index, capture.end_index, capture.taxonomy_name)


class SeverityScorer:
    """Maps captures onto the risk taxonomy and aggregates them."""

    def __init__(self, max_score: int = MAX_RISK_SCORE) -> None:
        self._max_score = max_score

    def score(self, captures: list[Capture]) -> ScoreReport:
        unique = self._deduplicate(captures)

        capabilities = Capability.NONE
        for capture in unique:
            category = RiskCategory.classify(capture.taxonomy_name)
            capabilities |= category.capabilities_of(capture.taxonomy_name)

        counted = self._select_ranges(unique)
        total = sum(RiskCategory.classify(c.taxonomy_name).weight for c in counted)

        findings: list[str] = []
        seen: set[str] = set()
        for capture in sorted(unique, key=_position_key):
            text = capture.format_finding()
            if text not in seen:
                seen.add(text)
                findings.append(text)

        return ScoreReport(
            risk_score=min(total, self._max_score),
            capabilities=capabilities,
            findings=tuple(findings),
            counted=tuple(sorted(counted, key=_position_key)),
        )

    @staticmethod
    def _deduplicate(captures: list[Capture]) -> list[Capture]:
        seen: set[tuple[str, int, int]] = set()
        unique: list[Capture] = []
        for capture in captures:
            key = (capture.taxonomy_name, capture.start_index, capture.end_index)
            if key in seen:
                continue
            seen.add(key)
            unique.append(capture)
        return unique

    @staticmethod
    def _select_ranges(captures: list[Capture]) -> list[Capture]:
        ordered = sorted(
            captures,
            key=lambda c: (-RiskCategory.classify(c.taxonomy_name).weight, *_position_key(c)),
        )
        selected: list[Capture] = []
        for capture in ordered:
            if any(capture.overlaps(s.start_index, s.end_index) for s in selected):
                continue
            selected.append(capture)
        return selected
