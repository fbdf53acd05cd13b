"""Hook scanner service: the host-facing API built on the analysis engine.

``HookScanner`` asks the syntax-tree engine first and always has an answer:

- engine result available: merged with the heuristic scan (flags OR-ed,
  findings concatenated without duplicates, score = max of the two);
- engine has no opinion: the heuristic result alone.

It also walks hook settings documents for inline hooks, maps scores to
display tiers, and renders the plain-text safety report shown before a hook
is installed or shared.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, Mapping

from hookwarden.config import ScannerConfig
from hookwarden.core.engine import HookAnalysisEngine
from hookwarden.core.languages import Language
from hookwarden.core.matcher import encode_source
from hookwarden.core.models import NoOpinion, ScanResult
from hookwarden.exceptions import HookReadError, SettingsError
from hookwarden.scanner.heuristics import HeuristicScanner
from hookwarden.scanner.models import HookFile, RiskLevel

logger = logging.getLogger(__name__)

_RISK_MARKERS: dict[RiskLevel, str] = {
    RiskLevel.SAFE: "✅",
    RiskLevel.WARNING: "⚠️",
    RiskLevel.DANGEROUS: "\U0001f534",
}


def merge_results(primary: ScanResult, secondary: ScanResult) -> ScanResult:
    """Combine two assessments of the same hook.

    Flags are OR-ed, findings are concatenated (primary first) with
    duplicates removed, and the score is the larger of the two.
    """
    findings = tuple(dict.fromkeys(primary.findings + secondary.findings))
    return ScanResult.from_capabilities(
        primary.capabilities | secondary.capabilities,
        findings,
        min(max(primary.risk_score, secondary.risk_score), 100),
    )


class HookScanner:
    """Scans hook scripts and hook settings for security risks.

    Args:
        engine: Syntax-tree engine; a default one is created when omitted.
        heuristics: Fallback scanner.
        config: Service limits.
    """

    def __init__(
        self,
        engine: HookAnalysisEngine | None = None,
        heuristics: HeuristicScanner | None = None,
        config: ScannerConfig | None = None,
    ) -> None:
        self._config = config or ScannerConfig()
        self._config.validate()
        self._engine = engine or HookAnalysisEngine()
        self._heuristics = heuristics or HeuristicScanner()

    @property
    def engine(self) -> HookAnalysisEngine:
        return self._engine

    # -- Single hooks -----------------------------------------------------

    def scan_hook(
        self,
        content: str,
        filename: str | None = None,
        language: Language | str | None = None,
    ) -> ScanResult:
        """Assess one hook. Never returns ``NoOpinion``."""
        result, _analyzed = self._assess(content, filename, language)
        return result

    def _assess(
        self,
        content: str,
        filename: str | None,
        language: Language | str | None,
    ) -> tuple[ScanResult, bool]:
        heuristic = self._heuristics.scan(content)
        if len(encode_source(content)) > self._config.max_content_bytes:
            logger.info(
                "Hook %s exceeds %d bytes; using heuristic scan only",
                filename or "<inline hook>", self._config.max_content_bytes,
            )
            return heuristic, False

        outcome = self._engine.scan(content, language=language, filename=filename)
        if isinstance(outcome, NoOpinion):
            logger.debug("No engine opinion for %s (%s): %s",
                         filename or "<inline hook>", outcome.reason.value, outcome.detail)
            return heuristic, False
        return merge_results(outcome, heuristic), True

    def scan_files(
        self,
        paths: Iterable[Path],
        event_type: str | None = None,
        language: Language | str | None = None,
    ) -> list[HookFile]:
        """Read and assess hook files concurrently, preserving input order.

        Raises:
            HookReadError: If a file cannot be read.
        """
        path_list = [Path(p) for p in paths]

        def _scan(path: Path) -> HookFile:
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise HookReadError(str(path), exc.strerror or str(exc)) from exc
            result, analyzed = self._assess(content, path.name, language)
            return HookFile(
                name=path.name,
                content=content,
                scan_result=result,
                event_type=event_type,
                analyzed=analyzed,
            )

        with ThreadPoolExecutor(max_workers=self._config.max_workers) as pool:
            return list(pool.map(_scan, path_list))

    # -- Settings documents -----------------------------------------------

    def scan_settings_hooks(self, settings: Mapping[str, Any]) -> dict[str, ScanResult]:
        """Assess every inline hook found in a settings document.

        Recognized layout::

            {"hooks": {"PreToolUse": [
                {"code": "..."},                                  # Event[i].inline
                {"matcher": "Bash", "hooks": [
                    {"code": "..."},                              # Event[i].hooks[j].inline
                    {"type": "command", "command": "..."},        # Event[i].hooks[j].command
                ]},
            ]}}

        Entries of any other shape are ignored.

        Raises:
            SettingsError: If ``settings`` is not a mapping.
        """
        if not isinstance(settings, Mapping):
            raise SettingsError(
                f"Hook settings must be a JSON object, got {type(settings).__name__}"
            )
        jobs = list(self._collect_inline_hooks(settings))
        if not jobs:
            return {}

        def _scan(job: tuple[str, str, Language | None]) -> ScanResult:
            _key, content, language = job
            return self.scan_hook(content, language=language)

        with ThreadPoolExecutor(max_workers=self._config.max_workers) as pool:
            results = list(pool.map(_scan, jobs))
        return {key: result for (key, _, _), result in zip(jobs, results)}

    @staticmethod
    def _collect_inline_hooks(
        settings: Mapping[str, Any],
    ) -> Iterable[tuple[str, str, Language | None]]:
        hooks_config = settings.get("hooks")
        if not isinstance(hooks_config, Mapping):
            return
        for event_type, configs in hooks_config.items():
            if not isinstance(configs, list):
                continue
            for i, config in enumerate(configs):
                if not isinstance(config, Mapping):
                    continue
                if isinstance(config.get("code"), str):
                    yield f"{event_type}[{i}].inline", config["code"], None
                nested = config.get("hooks")
                if not isinstance(nested, list):
                    continue
                for j, hook in enumerate(nested):
                    if not isinstance(hook, Mapping):
                        continue
                    if isinstance(hook.get("code"), str):
                        yield f"{event_type}[{i}].hooks[{j}].inline", hook["code"], None
                    if isinstance(hook.get("command"), str):
                        yield f"{event_type}[{i}].hooks[{j}].command", hook["command"], Language.BASH

    # -- Presentation -----------------------------------------------------

    @staticmethod
    def calculate_risk_level(result: ScanResult) -> RiskLevel:
        """Map a score to SAFE (<30), WARNING (30-69) or DANGEROUS (>=70)."""
        return RiskLevel.from_score(result.risk_score)

    def generate_safety_report(
        self,
        hooks: list[HookFile],
        inline_results: Mapping[str, ScanResult] | None = None,
    ) -> str:
        """Render a plain-text report of file-based and inline hooks."""
        lines: list[str] = []

        if hooks:
            lines.append("\n\U0001f4c4 File-based hooks:")
            for hook in hooks:
                marker = _RISK_MARKERS[hook.risk_level]
                lines.append(f"  {marker} {hook.name} ({hook.event_type or 'unknown'})")
                if not hook.analyzed:
                    lines.append("    (could not analyze this hook; heuristic scan only)")
                for finding in hook.scan_result.findings:
                    lines.append(f"    • {finding}")
                if hook.description:
                    lines.append(f"    Description: {hook.description}")

        if inline_results:
            lines.append("\n\U0001f4dd Inline hooks:")
            for hook_path, result in inline_results.items():
                marker = _RISK_MARKERS[self.calculate_risk_level(result)]
                lines.append(f"  {marker} {hook_path} (risk: {result.risk_score})")
                for finding in result.findings:
                    lines.append(f"    • {finding}")

        return "\n".join(lines)
