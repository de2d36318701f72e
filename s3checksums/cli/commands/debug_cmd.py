"""``s3checksums debug [ROOT_DIR]``: diagnose mirror drift.

Shorthand for ``reconcile --debug``: mirrors and classifies as usual,
writes ``results/debug_report.json`` and never modifies the bucket.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from s3checksums.cli.commands.reconcile import load_settings, run_reconciler
from s3checksums.monitor.renderer import ReportRenderer

console = Console()


def debug_cmd(
    root_dir: Path = typer.Argument(
        None,
        help="Working directory (default: temp).",
    ),
    limit: int = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Number of records to compare (default: 30).",
    ),
    prefix: str = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Source prefix to sample under.",
    ),
) -> None:
    """Compare local and remote records and show each strategy's decision."""
    settings = load_settings(root_dir=root_dir, prefix=prefix, debug=True, debug_limit=limit)
    result = run_reconciler(settings)

    renderer = ReportRenderer(console=console)
    if result.debug is not None:
        renderer.print_debug(result.debug)
    console.print(f"[dim]Report: {result.report_path}[/dim]")
