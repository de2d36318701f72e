"""``s3checksums report [ROOT_DIR]``: show the last written report."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from s3checksums.cli.commands.reconcile import load_settings
from s3checksums.core.reporter import Reporter
from s3checksums.monitor.renderer import ReportRenderer

console = Console()


def report_cmd(
    root_dir: Path = typer.Argument(
        None,
        help="Working directory the run wrote to (default: S3C_ROOT_DIR or temp).",
    ),
    items: int = typer.Option(
        20,
        "--items",
        "-n",
        min=0,
        help="Number of planned items to list.",
    ),
) -> None:
    """Pretty-print ``results/report.json`` without touching the bucket."""
    settings = load_settings(root_dir=root_dir)
    reporter = Reporter(settings.results_dir)
    try:
        report = reporter.load()
    except FileNotFoundError:
        console.print(f"[bold red]Report not found:[/bold red] {reporter.report_path}")
        console.print("[dim]Run a pass first with: s3checksums reconcile --dry-run[/dim]")
        raise typer.Exit(code=1)

    ReportRenderer(console=console).print_report(report, items=items)
