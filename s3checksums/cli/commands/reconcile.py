"""``s3checksums reconcile [ROOT_DIR]``: one reconciliation pass.

Builds both inventories, mirrors the records locally, classifies every
artifact, writes ``results/report.json`` and, unless this is a dry-run,
regenerates missing, empty and corrupt records.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from s3checksums.cli.logs import configure_logging
from s3checksums.config import ReconcilerSettings
from s3checksums.core.inventory import InventoryError
from s3checksums.core.preflight import ConfigurationError
from s3checksums.core.reconciler import ExitCode, Reconciler, RunResult
from s3checksums.models.sync import SyncMode
from s3checksums.monitor.renderer import ReportRenderer

console = Console()


def load_settings(**overrides: object) -> ReconcilerSettings:
    """Read settings from the environment and apply CLI overrides.

    Exits with the configuration-error status on invalid values.
    """
    try:
        return ReconcilerSettings().with_overrides(**overrides)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red]\n{escape(str(exc))}")
        raise typer.Exit(code=int(ExitCode.CONFIGURATION_ERROR))


def run_reconciler(settings: ReconcilerSettings) -> RunResult:
    """Run one pass, mapping fatal errors to exit codes."""
    configure_logging(settings.log_level)
    try:
        return Reconciler(settings).run()
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=int(ExitCode.CONFIGURATION_ERROR))
    except InventoryError as exc:
        console.print(f"[bold red]Inventory failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=int(ExitCode.INVENTORY_ERROR))


def reconcile_cmd(
    root_dir: Path = typer.Argument(
        None,
        help="Working directory for checksums/, downloads/ and results/ (default: temp).",
    ),
    dry_run: bool = typer.Option(
        None,
        "--dry-run/--execute",
        help="Only classify and write the report; transfer nothing.",
    ),
    prefix: str = typer.Option(
        None,
        "--prefix",
        "-p",
        help="Source prefix holding the artifacts (default: dist/).",
    ),
    check_orphans: bool = typer.Option(
        None,
        "--check-orphans/--no-check-orphans",
        help="Report records without artifacts and artifacts without records.",
    ),
    sync_mode: SyncMode = typer.Option(
        None,
        "--sync-mode",
        "-s",
        help="Mirror re-download strategy.",
        case_sensitive=False,
    ),
    use_rclone: bool = typer.Option(
        None,
        "--use-rclone/--no-use-rclone",
        help="Mirror records with rclone --checksum instead of the native sync.",
    ),
    batch_size: int = typer.Option(
        None,
        "--batch-size",
        "-b",
        min=1,
        help="Records uploaded per batch flush.",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Concurrent artifact downloads.",
    ),
    debug: bool = typer.Option(
        None,
        "--debug/--no-debug",
        help="Write debug_report.json and force dry-run.",
    ),
    debug_limit: int = typer.Option(
        None,
        "--debug-limit",
        min=1,
        help="Records sampled by --debug.",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    ),
) -> None:
    """Reconcile checksum records against the artifacts in the bucket.

    Exit status is 0 whenever the run completes, even if individual items
    failed; 2 for configuration errors; 3 when a listing cannot be obtained.
    """
    settings = load_settings(
        root_dir=root_dir,
        dry_run=dry_run,
        prefix=prefix,
        check_orphans=check_orphans,
        sync_mode=sync_mode,
        use_rclone=use_rclone,
        batch_size=batch_size,
        workers=workers,
        debug=debug,
        debug_limit=debug_limit,
        log_level=log_level,
    )
    result = run_reconciler(settings)

    renderer = ReportRenderer(console=console)
    renderer.print_report(result.report)
    if result.orphans is not None and (
        result.orphans.orphaned_records or result.orphans.orphaned_artifacts
    ):
        console.print(
            renderer.render_orphans(
                result.orphans,
                record_prefix=settings.record_prefix,
                limit=settings.orphan_display_limit,
            )
        )
    if result.debug is not None:
        renderer.print_debug(result.debug)

    if result.dry_run:
        console.print("[yellow]Dry-run: no records were changed.[/yellow]")
    console.print(f"[dim]Report: {result.report_path}[/dim]")
