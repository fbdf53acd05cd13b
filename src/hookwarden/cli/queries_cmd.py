"""``hookwarden queries``: Compile and lint the security query packs.

Loads each language's grammar, compiles every ``.scm`` file, and flags
capture names outside the risk taxonomy and its known helper captures.
Useful in CI to catch query syntax errors before they are silently skipped
at scan time.

Exit Codes:
    0: Every query compiled.
    1: At least one query failed to compile.
    2: The tree-sitter runtime is not installed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from hookwarden.config import EngineConfig
from hookwarden.core.engine import HookAnalysisEngine
from hookwarden.core.languages import Language
from hookwarden.exceptions import HookwardenError


@click.command("queries")
@click.option(
    "--language",
    type=click.Choice([lang.value for lang in Language]),
    default=None,
    help="Validate a single language (default: all).",
)
@click.option(
    "--query-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Validate queries from this directory instead of the built-in set.",
)
def queries_command(language: str | None, query_dir: str | None) -> None:
    """Validate the declarative security queries."""
    try:
        config = EngineConfig(query_dir=Path(query_dir)) if query_dir else EngineConfig()
        engine = HookAnalysisEngine(config)
    except HookwardenError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(2)

    if not engine.loader.ensure_runtime_ready():
        click.secho("tree-sitter runtime is not installed; cannot compile queries.", fg="red", err=True)
        sys.exit(2)

    languages = [Language(language)] if language else list(Language)
    reports = [engine.queries.validate(lang) for lang in languages]

    from hookwarden.cli.output import print_validation_reports

    print_validation_reports(reports)
    sys.exit(1 if any(r.error_count for r in reports) else 0)
