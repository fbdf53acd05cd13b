"""``hookwarden scan PATH...``: Assess hook scripts and hook settings.

Files are scanned as hook scripts; directories are walked for files with a
supported extension; ``.json`` files are read as settings documents and
their inline hooks scanned.

Exit Codes:
    0: No hook at or above the ``--fail-on`` level.
    1: One or more hooks at or above the ``--fail-on`` level.
    2: No hooks found, or the input could not be processed.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from hookwarden.config import EngineConfig
from hookwarden.core.engine import HookAnalysisEngine
from hookwarden.core.languages import EXTENSION_MAP, Language
from hookwarden.core.models import ScanResult
from hookwarden.exceptions import HookwardenError, SettingsError
from hookwarden.scanner import HookFile, HookScanner, RiskLevel

_FAIL_ON: dict[str, RiskLevel] = {
    "warning": RiskLevel.WARNING,
    "dangerous": RiskLevel.DANGEROUS,
}

_SETTINGS_SUFFIX = ".json"


def _collect_targets(paths: tuple[str, ...]) -> tuple[list[Path], list[Path]]:
    """Split CLI paths into hook scripts and settings documents.

    Returns:
        ``(hook_files, settings_files)`` in a stable order.
    """
    hook_files: list[Path] = []
    settings_files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            hook_files.extend(
                sorted(p for p in path.rglob("*")
                       if p.is_file() and p.suffix.lower() in EXTENSION_MAP)
            )
        elif path.suffix.lower() == _SETTINGS_SUFFIX:
            settings_files.append(path)
        else:
            hook_files.append(path)
    return hook_files, settings_files


def _load_settings(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SettingsError(f"{path}: not valid UTF-8 (byte {exc.start})") from exc
    except OSError as exc:
        raise SettingsError(f"{path}: cannot read settings ({exc.strerror or exc})") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc


def _results_to_json(
    hooks: list[HookFile],
    inline_results: dict[str, ScanResult],
) -> dict[str, Any]:
    """Convert scan results to a JSON-serializable document."""
    hook_entries = [
        {
            "name": h.name,
            "riskLevel": h.risk_level.label,
            "analyzed": h.analyzed,
            **h.scan_result.to_dict(),
        }
        for h in hooks
    ]
    inline_entries = {
        key: {"riskLevel": RiskLevel.from_score(r.risk_score).label, **r.to_dict()}
        for key, r in inline_results.items()
    }
    all_results = [h.scan_result for h in hooks] + list(inline_results.values())
    return {
        "hooks": hook_entries,
        "inline": inline_entries,
        "summary": {
            "total": len(all_results),
            "maxRiskScore": max((r.risk_score for r in all_results), default=0),
        },
    }


@click.command("scan")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--language",
    type=click.Choice([lang.value for lang in Language]),
    default=None,
    help="Force the hook language instead of detecting it from the file name.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@click.option(
    "--fail-on",
    type=click.Choice(sorted(_FAIL_ON)),
    default="dangerous",
    help="Exit with code 1 when any hook reaches this risk level (default: dangerous).",
)
@click.option(
    "--show-safe",
    is_flag=True,
    default=False,
    help="Include safe hooks in text output.",
)
@click.option(
    "--query-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Use security queries from this directory instead of the built-in set.",
)
def scan_command(
    paths: tuple[str, ...],
    language: str | None,
    output_format: str,
    fail_on: str,
    show_safe: bool,
    query_dir: str | None,
) -> None:
    """Assess hook scripts and hook settings for security risks.

    Exit code 0 if no hook reaches the --fail-on level, 1 otherwise.
    """
    try:
        config = EngineConfig.from_env()
        if query_dir:
            config = EngineConfig(
                query_dir=Path(query_dir),
                snippet_length=config.snippet_length,
                retry_unavailable=config.retry_unavailable,
            )
        scanner = HookScanner(engine=HookAnalysisEngine(config))

        hook_paths, settings_paths = _collect_targets(paths)
        hooks = scanner.scan_files(hook_paths, language=language)
        inline_results: dict[str, ScanResult] = {}
        for settings_path in settings_paths:
            for key, result in scanner.scan_settings_hooks(_load_settings(settings_path)).items():
                inline_results[f"{settings_path.name}:{key}"] = result
    except HookwardenError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(2)

    if not hooks and not inline_results:
        if output_format == "json":
            click.echo(json.dumps({"hooks": [], "inline": {}, "summary": "No hooks found"}))
        else:
            click.echo("No hooks found to scan.")
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps(_results_to_json(hooks, inline_results), indent=2))
    else:
        from hookwarden.cli.output import print_hook_results

        shown_hooks = hooks if show_safe else [h for h in hooks if h.risk_level > RiskLevel.SAFE]
        shown_inline = inline_results if show_safe else {
            k: r for k, r in inline_results.items()
            if RiskLevel.from_score(r.risk_score) > RiskLevel.SAFE
        }
        print_hook_results(shown_hooks, shown_inline)

    threshold = _FAIL_ON[fail_on]
    levels = [h.risk_level for h in hooks] + [
        RiskLevel.from_score(r.risk_score) for r in inline_results.values()
    ]
    sys.exit(1 if any(level >= threshold for level in levels) else 0)
