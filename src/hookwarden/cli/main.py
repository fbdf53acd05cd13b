"""hookwarden CLI: Static safety analysis for lifecycle hook scripts.

Entry point for the ``hookwarden`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan      : Assess hook scripts and hook settings documents.
    queries   : Compile and lint the security query packs.
    languages : Show which languages can be analyzed here.

Usage::

    hookwarden scan .claude/hooks
    hookwarden scan pre_tool_use.py --format json
    hookwarden scan .claude/settings.json --fail-on warning
    hookwarden queries --language bash
    hookwarden languages
"""

from __future__ import annotations

import logging

import click

from hookwarden import __version__
from hookwarden.cli.queries_cmd import queries_command
from hookwarden.cli.scan import scan_command
from hookwarden.core.engine import HookAnalysisEngine


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """hookwarden: Static safety analysis for lifecycle hook scripts.

    Parses hooks with tree-sitter, runs declarative security queries, and
    reports a capped 0-100 risk score with findings. Falls back to a
    heuristic scan where syntax-tree analysis is unavailable.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command("languages")
def languages_command() -> None:
    """Show which hook languages can be analyzed in this environment."""
    from hookwarden.cli.output import print_availability

    print_availability(HookAnalysisEngine().availability())


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(queries_command)
cli.add_command(languages_command)
