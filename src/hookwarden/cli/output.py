"""Rich output formatting helpers for the hookwarden CLI.

Risk Color Mapping:
    DANGEROUS = bold red, WARNING = yellow, SAFE = green
"""

from __future__ import annotations

from typing import Mapping

from rich.console import Console
from rich.table import Table
from rich.text import Text

from hookwarden.core.engine import EngineAvailability
from hookwarden.core.languages import Language
from hookwarden.core.models import ScanResult
from hookwarden.core.queries import QueryValidationReport
from hookwarden.scanner import HookFile, RiskLevel

_RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.DANGEROUS: "bold red",
    RiskLevel.WARNING: "yellow",
    RiskLevel.SAFE: "green",
}

console = Console()


def risk_style(level: RiskLevel) -> str:
    """Return the Rich style string for a given risk level."""
    return _RISK_STYLES.get(level, "white")


def _capability_summary(result: ScanResult) -> str:
    caps = [
        label for flag, label in (
            (result.has_file_system_access, "fs"),
            (result.has_network_access, "net"),
            (result.has_process_execution, "exec"),
            (result.has_dangerous_imports, "imports"),
            (result.has_credential_access, "creds"),
        ) if flag
    ]
    return ", ".join(caps) or "-"


def print_hook_results(
    hooks: list[HookFile],
    inline_results: Mapping[str, ScanResult],
    show_details: bool = True,
) -> None:
    """Print a table of scanned hooks followed by their findings.

    Args:
        hooks: File-based hooks.
        inline_results: Inline hooks from settings documents, keyed by path.
        show_details: Also list every finding under the table.
    """
    if not hooks and not inline_results:
        console.print("[green]All hooks are safe.[/green]")
        return

    table = Table(title="hookwarden Scan Results", show_header=True, header_style="bold")
    table.add_column("Hook", style="bold")
    table.add_column("Risk", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Capabilities", style="dim")
    table.add_column("Findings", justify="right")

    rows: list[tuple[str, ScanResult, bool]] = [
        (h.name, h.scan_result, h.analyzed) for h in hooks
    ] + [(key, result, True) for key, result in inline_results.items()]

    for name, result, analyzed in rows:
        level = RiskLevel.from_score(result.risk_score)
        label = level.name if analyzed else f"{level.name}*"
        table.add_row(
            name,
            Text(label, style=risk_style(level)),
            str(result.risk_score),
            _capability_summary(result),
            str(len(result.findings)),
        )

    console.print(table)
    if any(not analyzed for _, _, analyzed in rows):
        console.print("[dim]* could not analyze this hook; heuristic scan only[/dim]")

    if show_details:
        for name, result, _ in rows:
            if not result.findings:
                continue
            console.print(f"\n[bold]{name}[/bold]")
            for finding in result.findings:
                console.print(f"  • {finding}", markup=False, highlight=False)

    _print_summary([r for _, r, _ in rows])


def _print_summary(results: list[ScanResult]) -> None:
    """Print a one-line summary after the results table."""
    levels = [RiskLevel.from_score(r.risk_score) for r in results]
    parts = [f"[bold]{len(results)}[/bold] hooks scanned"]
    for level in (RiskLevel.SAFE, RiskLevel.WARNING, RiskLevel.DANGEROUS):
        count = levels.count(level)
        if count:
            parts.append(f"[{risk_style(level)}]{count} {level.label}[/{risk_style(level)}]")
    console.print(" | ".join(parts))


def print_validation_reports(reports: list[QueryValidationReport]) -> None:
    """Print per-language query validation outcomes."""
    for report in reports:
        console.print(f"\n[bold]{report.language.value.upper()} queries[/bold]")
        if not report.grammar_available:
            console.print(f"  [yellow]Grammar not available for {report.language.value}[/yellow]")
            continue
        if not report.files:
            console.print("  [yellow]No query files found[/yellow]")
            continue
        for file in report.files:
            if file.empty:
                console.print(f"  [yellow]empty[/yellow]  {file.name}")
            elif not file.compiled:
                console.print(f"  [bold red]error[/bold red]  {file.name}: {file.error}",
                              highlight=False)
            else:
                console.print(f"  [green]ok[/green]     {file.name}: {file.capture_count} captures")
            if file.missing_taxonomy_capture:
                console.print(f"         [yellow]no danger/warn/taint capture in {file.name}[/yellow]")
            for capture in file.unusual_captures:
                console.print(f"         [yellow]unusual capture @{capture}[/yellow]")

    total = sum(len(r.files) for r in reports)
    errors = sum(r.error_count for r in reports)
    warnings = sum(r.warning_count for r in reports)
    console.print(
        f"\n[bold]{total}[/bold] query files | [green]{total - errors} ok[/green]"
        f" | [red]{errors} errors[/red] | [yellow]{warnings} warnings[/yellow]"
    )


def print_availability(availability: EngineAvailability) -> None:
    """Print which languages the engine can analyze here."""
    table = Table(title="Syntax-tree analysis support", show_header=True, header_style="bold")
    table.add_column("Language", style="bold")
    table.add_column("Status", justify="center")
    for lang in Language:
        if availability.supports(lang):
            table.add_row(lang.value, Text("available", style="bold green"))
        else:
            table.add_row(lang.value, Text("heuristic only", style="yellow"))
    console.print(table)
    if not availability.available and availability.reason is not None:
        console.print(f"[yellow]Engine unavailable: {availability.reason.value}[/yellow]")
